import pytest

from ttclub.validation import (
    BoardDocument,
    MemberImport,
    NewPin,
    Profile,
    SignIn,
    SignUp,
    validate_form,
    validate_upload,
)


def test_sign_in_trims_email():
    model, error = validate_form(SignIn, {"email": "  kapitaen@ttc.de ", "password": "x"})

    assert error is None
    assert model.email == "kapitaen@ttc.de"


def test_sign_in_rejects_bad_email():
    model, error = validate_form(SignIn, {"email": "kein-email", "password": "geheim"})

    assert model is None
    assert error == "Bitte geben Sie eine gültige E-Mail-Adresse ein."


def test_sign_up_reports_every_password_rule():
    _, error = validate_form(
        SignUp,
        {"email": "a@b.de", "password": "abc", "first_name": "Anna", "last_name": "Müller"},
    )

    assert error == (
        "Passwort muss mindestens 8 Zeichen haben, "
        "Passwort muss mindestens einen Großbuchstaben enthalten, "
        "Passwort muss mindestens eine Zahl enthalten"
    )


def test_sign_up_name_characters():
    model, error = validate_form(
        SignUp,
        {"email": "a@b.de", "password": "Sicher123", "first_name": "Jean-Luc", "last_name": "O'Neill"},
    )
    assert error is None
    assert model.first_name == "Jean-Luc"

    _, error = validate_form(
        SignUp,
        {"email": "a@b.de", "password": "Sicher123", "first_name": "R2D2", "last_name": "X"},
    )
    assert error == "Nur Buchstaben, Leerzeichen, Bindestriche und Apostrophe erlaubt"


def test_profile_optional_fields():
    model, error = validate_form(Profile, {"postal_code": "", "photo_url": None, "city": " Köln "})
    assert error is None
    assert model.city == "Köln"

    _, error = validate_form(Profile, {"postal_code": "1234"})
    assert error == "PLZ muss genau 5 Ziffern haben"

    _, error = validate_form(Profile, {"photo_url": "nur-text"})
    assert error == "Ungültige URL"


def test_member_import_is_relaxed_but_checks_role():
    model, error = validate_form(
        MemberImport,
        {"first_name": "Max", "last_name": "Mustermann 3", "email": "kaputt", "role": "vorstand"},
    )
    assert error is None
    assert model.email == "kaputt"

    _, error = validate_form(MemberImport, {"first_name": "Max", "last_name": "M", "role": "kaiser"})
    assert error == "Ungültige Rolle"


def test_new_pin_requires_uuid_match_id():
    model, error = validate_form(
        NewPin,
        {"spielpin": "AB-12_c", "match_id": "6f1c8a0e-5b7d-4b8e-9a53-2a0c1d5e9f10"},
    )
    assert error is None
    assert model.spielpin == "AB-12_c"

    _, error = validate_form(NewPin, {"spielpin": "AB 12", "match_id": "nope"})
    assert "PIN darf nur Buchstaben, Zahlen, Bindestriche und Unterstriche enthalten" in error
    assert "Ungültige Spiel-ID" in error


def test_board_document_title_limits():
    _, error = validate_form(BoardDocument, {"title": ""})
    assert error == "Der Titel darf nicht leer sein."

    _, error = validate_form(BoardDocument, {"title": "x" * 101})
    assert error == "Der Titel darf maximal 100 Zeichen lang sein."


@pytest.mark.parametrize(
    "name, size, content_type, expected",
    [
        ("protokoll.pdf", 1024, "application/pdf", None),
        ("", 1024, "application/pdf", "Der Dateiname ist ungültig."),
        ("x" * 101, 1024, "application/pdf", "Der Dateiname ist ungültig."),
        ("gross.pdf", 11 * 1024 * 1024, "application/pdf", "Die Datei ist zu groß."),
        ("virus.exe", 10, "application/x-msdownload", "Dieser Dateityp wird nicht unterstützt."),
    ],
)
def test_validate_upload(name, size, content_type, expected):
    assert validate_upload(name, size, content_type) == expected
