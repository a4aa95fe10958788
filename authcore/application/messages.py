from __future__ import annotations


def verification_message(code: str, ttl_seconds: int) -> tuple[str, str]:
    minutes = max(1, ttl_seconds // 60)
    return (
        "Verify your Email Address",
        f"Your verification code is {code}. It expires in {minutes} minutes.",
    )


def password_reset_message(code: str, ttl_seconds: int) -> tuple[str, str]:
    minutes = max(1, ttl_seconds // 60)
    return (
        "Reset Your Password",
        f"Your password reset code is {code}. It expires in {minutes} minutes. "
        "If you did not ask for a reset, you can ignore this email.",
    )


def welcome_message(name: str) -> tuple[str, str]:
    return (
        "Welcome to Our Platform!",
        f"Hi {name or 'there'}, your email address is verified. Welcome aboard!",
    )
