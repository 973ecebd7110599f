"""处理结果模型。

定义单文件统计、批量汇总统计以及批量任务的数据结构。
"""

from pathlib import Path

from humanize import naturalsize
from pydantic import BaseModel, ConfigDict, Field, computed_field

from .constants import ErrorKind


def format_size(size_bytes: int) -> str:
    """格式化文件大小为人类可读格式"""
    return naturalsize(size_bytes, binary=True)


def calculate_savings(before: int, after: int) -> float:
    """计算节省比例（百分比），限制在 [0, 100]

    输出变大时返回 0，而不是负数。
    """
    if before <= 0:
        return 0.0
    savings = (before - after) / before * 100
    return min(100.0, max(0.0, savings))


class ProcessingStats(BaseModel):
    """单个文件的处理统计，编码成功后生成"""

    model_config = ConfigDict(frozen=True)

    input_size: int = Field(ge=0, description="输入文件大小（字节）")
    output_size: int = Field(ge=0, description="输出文件大小（字节）")
    width_before: int = Field(ge=0, description="原始宽度")
    height_before: int = Field(ge=0, description="原始高度")
    width_after: int = Field(ge=0, description="处理后宽度")
    height_after: int = Field(ge=0, description="处理后高度")
    format_used: str | None = Field(None, description="实际使用的输出格式")
    output_path: Path | None = Field(None, description="输出文件路径")

    @computed_field
    def was_resized(self) -> bool:
        """尺寸是否发生变化"""
        return (self.width_before, self.height_before) != (
            self.width_after,
            self.height_after,
        )

    @computed_field
    def savings_percent(self) -> float:
        """节省比例（百分比）"""
        return calculate_savings(self.input_size, self.output_size)

    def get_summary(self) -> str:
        """处理结果摘要"""
        summary = (
            f"{format_size(self.input_size)} → {format_size(self.output_size)}, "
            f"{self.width_before}x{self.height_before} → "
            f"{self.width_after}x{self.height_after}"
        )
        if self.output_size < self.input_size:
            summary += f" (减少 {self.savings_percent:.1f}%)"
        return summary


class FileTask(BaseModel):
    """单个待处理文件，由一个工作线程消费"""

    model_config = ConfigDict(frozen=True)

    source_path: Path
    destination_path: Path


class FileError(BaseModel):
    """单个文件的失败记录"""

    model_config = ConfigDict(frozen=True)

    context: str = Field(description="错误上下文（源文件路径）")
    kind: ErrorKind = Field(description="错误类别")
    message: str = Field(description="错误信息")

    def __str__(self) -> str:
        return f"{self.context}: {self.message}"


class FileOutcome(BaseModel):
    """单个任务的结果：成功时带统计，失败时带错误"""

    model_config = ConfigDict(frozen=True)

    source_path: Path
    stats: ProcessingStats | None = None
    error: FileError | None = None

    @property
    def success(self) -> bool:
        return self.error is None and self.stats is not None


class BatchStats(BaseModel):
    """批量处理汇总统计

    只由汇总步骤合并单文件结果，合并操作满足交换律和结合律。
    """

    processed_count: int = Field(0, ge=0, description="成功处理的文件数")
    total_size_before: int = Field(0, ge=0, description="处理前总大小")
    total_size_after: int = Field(0, ge=0, description="处理后总大小")
    errors: list[FileError] = Field(default_factory=list, description="失败记录")

    def record(self, outcome: FileOutcome) -> None:
        """合并单个任务结果"""
        if outcome.success and outcome.stats is not None:
            self.processed_count += 1
            self.total_size_before += outcome.stats.input_size
            self.total_size_after += outcome.stats.output_size
        elif outcome.error is not None:
            self.errors.append(outcome.error)

    def merge(self, other: "BatchStats") -> "BatchStats":
        """合并两个汇总，返回新的实例"""
        return BatchStats(
            processed_count=self.processed_count + other.processed_count,
            total_size_before=self.total_size_before + other.total_size_before,
            total_size_after=self.total_size_after + other.total_size_after,
            errors=[*self.errors, *other.errors],
        )

    @computed_field
    def savings_percent(self) -> float:
        """整体节省比例"""
        return calculate_savings(self.total_size_before, self.total_size_after)

    @property
    def failed_count(self) -> int:
        return len(self.errors)

    def get_summary(self) -> str:
        """批量处理摘要"""
        summary = (
            f"处理 {self.processed_count} 个文件, "
            f"{format_size(self.total_size_before)} → "
            f"{format_size(self.total_size_after)}"
        )
        if self.total_size_after < self.total_size_before:
            summary += f" (减少 {self.savings_percent:.1f}%)"
        if self.errors:
            summary += f", 失败 {self.failed_count} 个"
        return summary

    def get_error_lines(self) -> list[str]:
        """每个失败文件一行，按完成顺序"""
        return [str(error) for error in self.errors]
