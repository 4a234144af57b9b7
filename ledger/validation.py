import re
from typing import Callable, List, Tuple

from ledger.functional import Either, Left, Right

SYMBOLS = '!@#$%^&*(),.?":{}|<>'
MIN_PASSWORD_LENGTH = 8

PASSWORD_RULES: Tuple[Tuple[Callable[[str], bool], str], ...] = (
    (lambda p: len(p) >= MIN_PASSWORD_LENGTH,
     f"Password must be at least {MIN_PASSWORD_LENGTH} characters"),
    (lambda p: re.search(r"[A-Z]", p) is not None,
     "Password must contain at least one uppercase letter"),
    (lambda p: re.search(r"[a-z]", p) is not None,
     "Password must contain at least one lowercase letter"),
    (lambda p: re.search(r"[0-9]", p) is not None,
     "Password must contain at least one number"),
    (lambda p: any(ch in SYMBOLS for ch in p),
     "Password must contain at least one special character"),
)


def password_problems(password: str) -> List[str]:
    return [message for rule, message in PASSWORD_RULES if not rule(password)]


def check_password(password: str) -> Either[List[str], str]:
    problems = password_problems(password or "")
    if problems:
        return Left(problems)
    return Right(password)


def check_signup(email: str, password: str) -> Either[List[str], Tuple[str, str]]:
    if not email or not password:
        return Left(["Email and password are required"])
    checked = check_password(password)
    if checked.is_left():
        return Left(checked.get_error())
    return Right((email.strip(), password))
