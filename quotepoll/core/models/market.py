"""Market-related enums and symbol descriptors."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator


class MarketSegment(str, Enum):
    """市场板块枚举."""

    TWSE = "twse"  # 上市
    OTC = "otc"  # 上柜

    @property
    def query_prefix(self) -> str:
        """Prefix used by the MIS endpoint's ``ex_ch`` parameter."""
        return "tse" if self is MarketSegment.TWSE else "otc"


class SymbolDescriptor(BaseModel):
    """单只股票描述."""

    model_config = ConfigDict(frozen=True)

    code: str
    name: str
    segment: MarketSegment = MarketSegment.TWSE

    @field_validator("code")
    @classmethod
    def _strip_code(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("symbol code cannot be empty")
        return stripped

    @property
    def query_key(self) -> str:
        return f"{self.segment.query_prefix}_{self.code}.tw"
