from datetime import datetime
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

Tag = Annotated[str, StringConstraints(max_length=50)]
Resource = Annotated[str, StringConstraints(max_length=200)]


class IdeaBase(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=5000)
    status: str = Field(default="idea", max_length=30)
    category: Optional[str] = Field(default=None, max_length=100)
    project_type: Optional[str] = Field(default=None, max_length=100)
    brainstorm: Optional[str] = Field(default=None, max_length=10000)
    main_goal: Optional[str] = Field(default=None, max_length=1000)
    target_audience: Optional[str] = Field(default=None, max_length=1000)
    estimated_time: Optional[str] = Field(default=None, max_length=100)
    main_risk: Optional[str] = Field(default=None, max_length=1000)
    main_difficulty: Optional[str] = Field(default=None, max_length=1000)
    personal_motivation: Optional[str] = Field(default=None, max_length=2000)
    profit_potential: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = Field(default=None, max_length=10000)
    tags: Optional[List[Tag]] = Field(default=None, max_length=20)
    required_resources: Optional[List[Resource]] = Field(default=None, max_length=50)
    checklist: Optional[List[Any]] = None
    progress: Optional[int] = Field(default=0, ge=0, le=100)
    is_favorite: bool = False


class IdeaOut(IdeaBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    updated_at: datetime


class LearningBase(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=10000)
    category: str = Field(default="geral", min_length=1, max_length=100)
    tags: Optional[List[Tag]] = Field(default=None, max_length=20)
    is_favorite: bool = False
    linked_project_id: Optional[int] = None
    linked_idea_id: Optional[int] = None


class LearningOut(LearningBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    date: datetime
    created_at: datetime


class PersonalNoteBase(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(default="", max_length=50000)
    tags: Optional[List[Tag]] = Field(default=None, max_length=20)
    is_pinned: bool = False
    reminder_date: Optional[datetime] = None
    linked_project_id: Optional[int] = None
    linked_idea_id: Optional[int] = None


class PersonalNoteOut(PersonalNoteBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    updated_at: datetime


class GlobalTaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)


class GlobalTaskUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    completed: Optional[bool] = None


class GlobalTaskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    completed: bool
    created_at: datetime
