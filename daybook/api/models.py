"""
Pydantic request/response models for the timeline API.

Field names follow the persisted JSON format (start_time, block_type_id,
current_block_name, ...) so clients can send back what they read.
"""

import datetime as dt

from pydantic import AwareDatetime, BaseModel, Field

from daybook.categories import Category, Color
from daybook.timeline import Block, CurrentBlock

# ==== Blocks ====


class BlockModel(BaseModel):
    """A recorded block. Timestamps must carry a UTC offset (naive ones are a 422)."""

    start_time: AwareDatetime
    end_time: AwareDatetime
    block_type_id: int = Field(default=0, ge=0, le=255)
    title: str = ""

    def to_block(self) -> Block:
        return Block(
            start=self.start_time,
            end=self.end_time,
            category_id=self.block_type_id,
            title=self.title,
        )

    @classmethod
    def from_block(cls, block: Block) -> "BlockModel":
        return cls(
            start_time=block.start,
            end_time=block.end,
            block_type_id=block.category_id,
            title=block.title,
        )


class ContentModel(BaseModel):
    """Category and title for one piece of a split block."""

    block_type_id: int = Field(default=0, ge=0, le=255)
    title: str = ""

    def as_tuple(self) -> tuple[int, str]:
        return self.block_type_id, self.title


class SplitRequest(BaseModel):
    start_time: AwareDatetime = Field(..., description="Start of the block to split")
    end_time: AwareDatetime = Field(..., description="End of the block to split")
    split_time: AwareDatetime = Field(..., description="Must lie strictly inside the block")
    before: ContentModel
    after: ContentModel


class AdjustRequest(BaseModel):
    start_time: AwareDatetime = Field(..., description="Start of the block to adjust")
    end_time: AwareDatetime = Field(..., description="End of the block to adjust")
    new_start_time: AwareDatetime
    new_end_time: AwareDatetime
    block_type_id: int = Field(default=0, ge=0, le=255)
    title: str = ""


# ==== Current block ====


class CurrentBlockModel(BaseModel):
    block_type_id: int = Field(default=0, ge=0, le=255)
    current_block_name: str = ""

    def to_current(self) -> CurrentBlock:
        return CurrentBlock(category_id=self.block_type_id, title=self.current_block_name)

    @classmethod
    def from_current(cls, current: CurrentBlock) -> "CurrentBlockModel":
        return cls(block_type_id=current.category_id, current_block_name=current.title)


# ==== Categories ====


class ColorModel(BaseModel):
    r: int = Field(ge=0, le=255)
    g: int = Field(ge=0, le=255)
    b: int = Field(ge=0, le=255)

    def to_color(self) -> Color:
        return Color(self.r, self.g, self.b)


class CategoryModel(BaseModel):
    id: int = Field(ge=0, le=255)
    name: str
    color: ColorModel

    def to_category(self) -> Category:
        return Category(id=self.id, name=self.name, color=self.color.to_color())

    @classmethod
    def from_category(cls, category: Category) -> "CategoryModel":
        color = category.color
        return cls(
            id=category.id,
            name=category.name,
            color=ColorModel(r=color.r, g=color.g, b=color.b),
        )


class NewCategoryRequest(BaseModel):
    name: str = Field(..., min_length=1)
    color: ColorModel


# ==== Sync ====


class SyncRequest(BaseModel):
    """Everything an offline client recorded, grouped by date."""

    timeblocks: dict[dt.date, list[BlockModel]] = Field(default_factory=dict)
    blocktypes: list[CategoryModel] = Field(default_factory=list)
    currentblock: CurrentBlockModel


class SyncDateResult(BaseModel):
    date: dt.date
    appended: int
    dropped: int
    filler: BlockModel | None = None


class SyncResponse(BaseModel):
    appended: int
    dropped: int
    blocktypes_added: int
    dates: list[SyncDateResult]


# ==== Composite ====


class StateResponse(BaseModel):
    """Everything a client needs to render a day."""

    date: dt.date
    blocktypes: list[CategoryModel]
    daydata: list[BlockModel]
    currentblock: CurrentBlockModel


class MutationResponse(BaseModel):
    success: bool = True
    blocks: list[BlockModel] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str
    timestamp: str
