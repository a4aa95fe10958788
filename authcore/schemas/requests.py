from pydantic import BaseModel, EmailStr, Field


class RegisterIn(BaseModel):
    name: str = Field(..., description="Display name", min_length=2, max_length=20)
    email: EmailStr = Field(..., description="Contact address", max_length=255)
    password: str = Field(..., min_length=8, max_length=72)


class VerifyEmailIn(BaseModel):
    email: EmailStr = Field(..., max_length=255)
    otp: str = Field(..., min_length=6, max_length=6)


class LoginIn(BaseModel):
    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=1, max_length=72)


class ForgotPasswordIn(BaseModel):
    email: EmailStr = Field(..., max_length=255)


class ResetPasswordIn(BaseModel):
    email: EmailStr = Field(..., max_length=255)
    otp: str = Field(..., min_length=6, max_length=6)
    password: str = Field(..., min_length=8, max_length=72)
