"""Unit tests for patch and form schemas."""

import uuid

import pytest
from pydantic import ValidationError

from coedit.domains.documents.schemas import DocumentPatch, PermissionsAdd
from coedit.domains.identity.schemas import RegisterForm, UserPatch
from coedit.domains.identity.services import form_errors


class TestUserPatch:
    """Tests for UserPatch."""

    def test_changes_only_set_fields(self):
        patch = UserPatch(email_verified=True)
        assert patch.changes() == {"email_verified": True}

    def test_unknown_field_rejected(self):
        """Arbitrary fields cannot be injected into an update."""
        with pytest.raises(ValidationError):
            UserPatch.model_validate({"password": "plaintext"})

    @pytest.mark.parametrize("field", ["username", "email_verified"])
    def test_null_for_required_column_rejected(self, field):
        with pytest.raises(ValidationError):
            UserPatch.model_validate({field: None})


class TestDocumentPatch:
    """Tests for DocumentPatch."""

    def test_explicit_none_is_kept(self):
        """Setting a link to None unsets it."""
        patch = DocumentPatch(read_link=None, title="Notes")
        assert patch.changes() == {"read_link": None, "title": "Notes"}

    def test_negative_counter_rejected(self):
        with pytest.raises(ValidationError):
            DocumentPatch(word_count=-1)

    def test_content_requires_node_type(self):
        with pytest.raises(ValidationError):
            DocumentPatch(content={"content": []})

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            DocumentPatch.model_validate({"owner": str(uuid.uuid4())})

    @pytest.mark.parametrize("field", ["title", "char_count", "char_count_no_spaces", "word_count", "content"])
    def test_null_for_required_column_rejected(self, field):
        with pytest.raises(ValidationError):
            DocumentPatch.model_validate({field: None})


class TestPermissions:
    """Tests for permission deltas."""

    def test_defaults_are_empty(self):
        perms = PermissionsAdd()
        assert perms.perm_read_add == []
        assert perms.perm_edit_add == []

    def test_ids_parsed_from_strings(self):
        user_id = uuid.uuid4()
        perms = PermissionsAdd.model_validate({"perm_read_add": [str(user_id)]})
        assert perms.perm_read_add == [user_id]


class TestRegisterForm:
    """Tests for RegisterForm."""

    def test_valid_form(self):
        form = RegisterForm(username="  carol ", password="pw", email="carol@example.com", confirm_password="pw")
        assert form.username == "carol"

    def test_collects_all_mistakes(self):
        """Every invalid field is reported, like the client-side form check."""
        with pytest.raises(ValidationError) as exc_info:
            RegisterForm(username="   ", password="pw", email="not-an-email")

        message = form_errors(exc_info.value)
        assert "Username cannot be empty" in message
        assert "Please insert a valid email" in message

    def test_password_confirmation_mismatch(self):
        with pytest.raises(ValidationError) as exc_info:
            RegisterForm(username="carol", password="pw", email="carol@example.com", confirm_password="other")

        assert "Passwords are not matching" in form_errors(exc_info.value)

    def test_missing_fields_are_checked(self):
        """Omitted fields fail the same checks as empty ones."""
        with pytest.raises(ValidationError) as exc_info:
            RegisterForm.model_validate({})

        message = form_errors(exc_info.value)
        assert "Username cannot be empty" in message
        assert "Please insert a valid email" in message
        assert "Password cannot be empty" in message
