"""Form validation schemas with German error messages."""

from __future__ import annotations

import re
import uuid
from typing import Annotated, Any, Callable, Dict, Optional, Tuple, Type, TypeVar
from urllib.parse import urlparse

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, ValidationError
from pydantic_core import PydanticCustomError

from ttclub.error_handling import ERROR_MESSAGES

M = TypeVar("M", bound=BaseModel)
Check = Tuple[Callable[[str], bool], str]

FILE_VALIDATION_RULES: Dict[str, Any] = {
    "max_size": 10 * 1024 * 1024,
    "allowed_types": frozenset(
        {
            "application/pdf",
            "application/msword",
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            "application/vnd.ms-excel",
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            "text/csv",
            "text/plain",
            "application/rtf",
            "image/png",
            "image/jpeg",
        }
    ),
    "max_name_length": 100,
}

MEMBER_ROLES = ("mitglied", "player", "admin", "moderator", "vorstand", "mannschaftsfuehrer")


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def _min(n: int) -> Callable[[str], bool]:
    return lambda v: len(v) >= n


def _max(n: int) -> Callable[[str], bool]:
    return lambda v: len(v) <= n


def _matches(pattern: str) -> Callable[[str], bool]:
    compiled = re.compile(pattern)
    return lambda v: compiled.search(v) is not None


def _is_email(value: str) -> bool:
    return re.fullmatch(r"[^\s@]+@[^\s@]+\.[^\s@]+", value) is not None


def _is_url(value: str) -> bool:
    parsed = urlparse(value)
    return bool(parsed.scheme and parsed.netloc)


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def _rules(*checks: Check, optional: bool = False) -> AfterValidator:
    """Run every check and report all failing messages at once."""

    def validate(value: Optional[str]) -> Optional[str]:
        if optional and not value:
            return value
        errors = [message for check, message in checks if not check(value)]
        if errors:
            raise PydanticCustomError("ttclub_validation", ", ".join(errors))
        return value

    return AfterValidator(validate)


Trimmed = BeforeValidator(_strip)

_EMAIL_CHECKS = (
    (_is_email, "Bitte geben Sie eine gültige E-Mail-Adresse ein."),
    (_max(255), "Die E-Mail-Adresse darf maximal 255 Zeichen lang sein."),
)
_NAME_CHECKS = (
    (_min(1), "Dieses Feld ist erforderlich"),
    (_max(100), "Darf maximal 100 Zeichen haben"),
    (_matches(r"^[a-zA-ZäöüÄÖÜß\s\-']+$"), "Nur Buchstaben, Leerzeichen, Bindestriche und Apostrophe erlaubt"),
)
_PHONE_CHECKS = (
    (_matches(r"^[\d\s\-+()/]*$"), "Ungültige Telefonnummer"),
    (_max(20), "Telefonnummer darf maximal 20 Zeichen haben"),
)
_PIN_CHECKS = (
    (_min(1), "PIN ist erforderlich"),
    (_max(50), "PIN darf maximal 50 Zeichen haben"),
    (_matches(r"^[A-Za-z0-9\-_]+$"), "PIN darf nur Buchstaben, Zahlen, Bindestriche und Unterstriche enthalten"),
)
_TITLE_CHECKS = (
    (_min(1), "Der Titel darf nicht leer sein."),
    (_max(100), "Der Titel darf maximal 100 Zeichen lang sein."),
)

Email = Annotated[str, Trimmed, _rules(*_EMAIL_CHECKS)]
OptionalEmail = Annotated[Optional[str], Trimmed, _rules(*_EMAIL_CHECKS, optional=True)]
Password = Annotated[
    str,
    _rules(
        (_min(8), "Passwort muss mindestens 8 Zeichen haben"),
        (_max(100), "Passwort darf maximal 100 Zeichen haben"),
        (_matches(r"[A-Z]"), "Passwort muss mindestens einen Großbuchstaben enthalten"),
        (_matches(r"[a-z]"), "Passwort muss mindestens einen Kleinbuchstaben enthalten"),
        (_matches(r"[0-9]"), "Passwort muss mindestens eine Zahl enthalten"),
    ),
]
Name = Annotated[str, Trimmed, _rules(*_NAME_CHECKS)]
OptionalName = Annotated[Optional[str], Trimmed, _rules(*_NAME_CHECKS, optional=True)]
ImportName = Annotated[
    str,
    Trimmed,
    _rules((_min(1), "Dieses Feld ist erforderlich"), (_max(200), "Darf maximal 200 Zeichen haben")),
]
Phone = Annotated[Optional[str], Trimmed, _rules(*_PHONE_CHECKS, optional=True)]
PostalCode = Annotated[
    Optional[str], Trimmed, _rules((_matches(r"^\d{5}$"), "PLZ muss genau 5 Ziffern haben"), optional=True)
]
Street = Annotated[
    Optional[str], Trimmed, _rules((_max(200), "Straße darf maximal 200 Zeichen haben"), optional=True)
]
City = Annotated[Optional[str], Trimmed, _rules((_max(100), "Ort darf maximal 100 Zeichen haben"), optional=True)]
Url = Annotated[
    Optional[str],
    Trimmed,
    _rules((_is_url, "Ungültige URL"), (_max(500), "URL darf maximal 500 Zeichen haben"), optional=True),
]
MemberNumber = Annotated[
    Optional[str], Trimmed, _rules((_max(50), "Mitgliedsnummer darf maximal 50 Zeichen haben"), optional=True)
]
OptionalText = Annotated[Optional[str], Trimmed]
Pin = Annotated[str, Trimmed, _rules(*_PIN_CHECKS)]
GameCode = Annotated[
    Optional[str], Trimmed, _rules((_max(50), "Spielcode darf maximal 50 Zeichen haben"), optional=True)
]


def _limited(n: int) -> Any:
    return Annotated[Optional[str], Trimmed, _rules((_max(n), f"Darf maximal {n} Zeichen haben"), optional=True)]


Limited20 = _limited(20)
Limited50 = _limited(50)
Limited100 = _limited(100)
Limited200 = _limited(200)
Limited300 = _limited(300)
Role = Annotated[Optional[str], Trimmed, _rules((lambda v: v in MEMBER_ROLES, "Ungültige Rolle"), optional=True)]
RequiredPassword = Annotated[str, _rules((_min(1), "Passwort ist erforderlich"))]
MatchId = Annotated[str, Trimmed, _rules((_is_uuid, "Ungültige Spiel-ID"))]
Title = Annotated[str, _rules(*_TITLE_CHECKS)]
Description = Annotated[
    Optional[str],
    _rules((_max(1000), "Die Beschreibung darf maximal 1000 Zeichen lang sein."), optional=True),
]
Content = Annotated[
    str,
    _rules(
        (_min(1), "Der Inhalt darf nicht leer sein."),
        (_max(5000), "Der Inhalt darf maximal 5000 Zeichen lang sein."),
    ),
]


class _Schema(BaseModel):
    model_config = ConfigDict(extra="ignore")


class SignIn(_Schema):
    email: Email
    password: RequiredPassword


class SignUp(_Schema):
    email: Email
    password: Password
    first_name: Name
    last_name: Name


class PasswordChange(_Schema):
    password: Password


class Profile(_Schema):
    first_name: OptionalName = None
    last_name: OptionalName = None
    email: OptionalEmail = None
    phone: Phone = None
    mobile: Phone = None
    member_number: MemberNumber = None
    street: Street = None
    postal_code: PostalCode = None
    city: City = None
    birthday: OptionalText = None
    member_since: OptionalText = None
    photo_url: Url = None


class MemberImport(_Schema):
    """Very relaxed rules for spreadsheet imports."""

    first_name: ImportName
    last_name: ImportName
    email: OptionalText = None
    phone: Limited50 = None
    mobile: Limited50 = None
    member_number: Limited100 = None
    street: Limited300 = None
    postal_code: Limited20 = None
    city: Limited200 = None
    birthday: OptionalText = None
    temporary_password: OptionalText = None
    role: Role = None


class MatchPin(_Schema):
    spielpin: Pin
    spielpartie_pin: GameCode = None


class NewPin(MatchPin):
    match_id: MatchId


class BoardDocument(_Schema):
    title: Title
    description: Description = None


class BoardMessage(_Schema):
    title: Title
    content: Content


def get_validation_error(error: ValidationError) -> str:
    return ", ".join(err["msg"] for err in error.errors())


def validate_form(schema: Type[M], data: Dict[str, Any]) -> Tuple[Optional[M], Optional[str]]:
    """Validate ``data``; return ``(model, None)`` or ``(None, message)``."""
    try:
        return schema.model_validate(data), None
    except ValidationError as exc:
        return None, get_validation_error(exc)


def validate_upload(name: str, size: int, content_type: str) -> Optional[str]:
    """Return a user message when an upload breaks the file rules, else ``None``."""

    messages = ERROR_MESSAGES["FILE"]
    if not name or len(name) > FILE_VALIDATION_RULES["max_name_length"]:
        return messages["NAME_ERROR"]
    if size > FILE_VALIDATION_RULES["max_size"]:
        return messages["SIZE_ERROR"]
    if content_type not in FILE_VALIDATION_RULES["allowed_types"]:
        return messages["INVALID_TYPE"]
    return None


__all__ = [
    "FILE_VALIDATION_RULES",
    "MEMBER_ROLES",
    "SignIn",
    "SignUp",
    "PasswordChange",
    "Profile",
    "MemberImport",
    "MatchPin",
    "NewPin",
    "BoardDocument",
    "BoardMessage",
    "get_validation_error",
    "validate_form",
    "validate_upload",
]
