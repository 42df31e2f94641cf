from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator, ConfigDict
from email_validator import validate_email, EmailNotValidError
from typing import Optional, Literal


class UserPatch(BaseModel):
    """Схема для частичного обновления пользователя"""
    username: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    token: Optional[str] = Field(None, max_length=255)
    email_verified: Optional[bool] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator('username', 'email_verified')
    @classmethod
    def validate_not_null(cls, v, info):
        if v is None:
            raise ValueError(f'{info.field_name} cannot be null')
        return v

    def changes(self) -> dict:
        """Только явно переданные поля"""
        return self.model_dump(exclude_unset=True)


class RegisterForm(BaseModel):
    """Схема формы регистрации"""
    # Пустые значения по умолчанию проходят те же проверки, что и введенные
    username: str = Field("", validate_default=True)
    password: str = Field("", validate_default=True)
    email: str = Field("", validate_default=True)
    confirm_password: Optional[str] = None

    @field_validator('username')
    @classmethod
    def validate_username(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Username cannot be empty')
        return v

    @field_validator('email')
    @classmethod
    def validate_email_address(cls, v):
        try:
            validate_email(v, check_deliverability=False)
        except EmailNotValidError:
            raise ValueError('Please insert a valid email')
        return v

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        if not v:
            raise ValueError('Password cannot be empty')
        return v

    @model_validator(mode='after')
    def validate_confirmation(self):
        if self.confirm_password is not None and self.confirm_password != self.password:
            raise ValueError('Passwords are not matching')
        return self


class RegisterResult(BaseModel):
    """Ответ на отправку формы регистрации"""
    status: Literal["success", "neutral", "fail"]
    message: Optional[str] = None
