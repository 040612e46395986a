"""Class schemas."""
from typing import List, Optional
from pydantic import Field, field_validator

from rollcall.core.sanitization import MAX_DESCRIPTION_LENGTH, sanitize_class_code, sanitize_name, sanitize_text
from rollcall.schemas.common import CamelModel


class ClassCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    max_students: Optional[int] = Field(None, ge=1)

    @field_validator('name')
    @classmethod
    def sanitize_name_field(cls, v: str) -> str:
        return sanitize_name(v)

    @field_validator('description')
    @classmethod
    def sanitize_description_field(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            return sanitize_text(v, max_length=MAX_DESCRIPTION_LENGTH)
        return v


class ClassUpdate(ClassCreate):
    name: Optional[str] = Field(None, max_length=200)
    status: Optional[str] = None

    @field_validator('name')
    @classmethod
    def sanitize_name_field(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            return sanitize_name(v)
        return v


class JoinClassRequest(CamelModel):
    code: str = Field(..., min_length=1, max_length=50)

    @field_validator('code')
    @classmethod
    def sanitize_code_field(cls, v: str) -> str:
        return sanitize_class_code(v)


class ClassOut(CamelModel):
    id: int
    code: str
    name: str
    description: Optional[str] = None
    max_students: Optional[int] = None
    status: str
    teacher_id: int
    teacher_name: Optional[str] = None
    student_count: int
    created_at: Optional[str] = None


class ClassStudent(CamelModel):
    id: int
    name: str
    email: str
    student_id: Optional[str] = None


class ClassStudentsOut(CamelModel):
    class_info: ClassOut
    students: List[ClassStudent]
