from pydantic import BaseModel, Field, field_validator, ConfigDict
from typing import Optional, List, Any, Dict
import uuid


class DocumentPatch(BaseModel):
    """Схема для частичного обновления документа"""
    title: Optional[str] = Field(None, max_length=255)
    char_count: Optional[int] = Field(None, ge=0)
    char_count_no_spaces: Optional[int] = Field(None, ge=0)
    word_count: Optional[int] = Field(None, ge=0)
    content: Optional[Dict[str, Any]] = None
    read_link: Optional[str] = Field(None, max_length=255)
    edit_link: Optional[str] = Field(None, max_length=255)

    model_config = ConfigDict(extra="forbid")

    @field_validator('title', 'char_count', 'char_count_no_spaces', 'word_count', 'content')
    @classmethod
    def validate_not_null(cls, v, info):
        # None допустим только для ссылок
        if v is None:
            raise ValueError(f'{info.field_name} cannot be null')
        return v

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError('Title cannot be empty')
        return v

    @field_validator('content')
    @classmethod
    def validate_content(cls, v):
        if "type" not in v:
            raise ValueError('Content must be a rich-text node with a "type"')
        return v

    def changes(self) -> dict:
        """Только явно переданные поля"""
        return self.model_dump(exclude_unset=True)


class PermissionsAdd(BaseModel):
    """Инкрементальное добавление прав"""
    perm_read_add: List[uuid.UUID] = Field(default_factory=list)
    perm_edit_add: List[uuid.UUID] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class PermissionsRemove(BaseModel):
    """Инкрементальное удаление прав"""
    perm_read_remove: List[uuid.UUID] = Field(default_factory=list)
    perm_edit_remove: List[uuid.UUID] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")
