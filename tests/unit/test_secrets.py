"""Tests for deploy key Secret utilities."""

from __future__ import annotations

from unittest.mock import Mock, patch

import pytest

from github_operator.constants import KIND_KEY, SECRET_PUBLIC_KEY
from github_operator.utils.errors import NotFoundError, SecretNotVisibleError
from github_operator.utils.secrets import (
    build_owner_reference,
    owner_references_for,
    public_key_matches,
    resolve_secret_ref,
    wait_for_secret,
)


def make_key(namespace="default", name="deploy", template=None):
    return {
        "apiVersion": "github.cloud37.dev/v1alpha1",
        "kind": KIND_KEY,
        "metadata": {"name": name, "namespace": namespace, "uid": "uid-123"},
        "spec": {"repositoryRef": "demo", "secretTemplate": template},
    }


class TestResolveSecretRef:
    """Test cases for resolve_secret_ref function."""

    def test_defaults_to_key_identity(self):
        """Without a template the Secret shares the Key's namespace and name."""
        assert resolve_secret_ref(make_key()) == ("default", "deploy")

    def test_name_override(self):
        """nameOverride replaces only the name."""
        assert resolve_secret_ref(make_key(template={"nameOverride": "ci"})) == ("default", "ci")

    def test_target_namespace(self):
        """targetNamespace replaces only the namespace."""
        assert resolve_secret_ref(make_key(template={"targetNamespace": "vault"})) == ("vault", "deploy")

    def test_empty_overrides_ignored(self):
        """Empty override strings fall back to the defaults."""
        template = {"targetNamespace": "", "nameOverride": ""}
        assert resolve_secret_ref(make_key(template=template)) == ("default", "deploy")


class TestOwnerReferences:
    """Test cases for owner reference helpers."""

    def test_build_owner_reference(self):
        """The reference points at the owner as its controller."""
        ref = build_owner_reference(make_key())

        assert ref == {
            "apiVersion": "github.cloud37.dev/v1alpha1",
            "kind": KIND_KEY,
            "name": "deploy",
            "uid": "uid-123",
            "controller": True,
            "blockOwnerDeletion": True,
        }

    def test_same_namespace_gets_owner(self):
        """A Secret beside its Key is owned by it."""
        assert len(owner_references_for(make_key(), "default")) == 1

    def test_other_namespace_gets_none(self):
        """A Secret in another namespace cannot be owned."""
        assert owner_references_for(make_key(), "vault") == []


class TestPublicKeyMatches:
    """Test cases for public_key_matches function."""

    def test_equal_keys(self):
        secret = {"data": {SECRET_PUBLIC_KEY: "ssh-rsa AAAA\n"}}
        assert public_key_matches("ssh-rsa AAAA\n", secret)

    def test_whitespace_trimmed(self):
        secret = {"data": {SECRET_PUBLIC_KEY: "  ssh-rsa AAAA\n"}}
        assert public_key_matches("ssh-rsa AAAA", secret)

    def test_different_keys(self):
        secret = {"data": {SECRET_PUBLIC_KEY: "ssh-rsa BBBB\n"}}
        assert not public_key_matches("ssh-rsa AAAA\n", secret)

    def test_no_data(self):
        """A Secret without data never matches, not even an empty status."""
        assert not public_key_matches("", {"data": {}})
        assert not public_key_matches(None, {})

    def test_missing_public_key_entry(self):
        """A Secret lacking identity.pub never matches, not even an empty status."""
        assert not public_key_matches("", {"data": {"identity": "private"}})
        assert not public_key_matches(None, {"data": {SECRET_PUBLIC_KEY: "  \n"}})

    def test_missing_public_key_field(self):
        secret = {"data": {"other": "x"}}
        assert not public_key_matches("ssh-rsa AAAA\n", secret)


class TestWaitForSecret:
    """Test cases for wait_for_secret function."""

    @patch("github_operator.utils.secrets.time.sleep")
    def test_immediately_visible(self, mock_sleep):
        """A readable Secret is returned after one read."""
        store = Mock()
        store.get_secret.return_value = {"data": {}}

        assert wait_for_secret(store, "default", "deploy", attempts=10, interval=0.01) == {"data": {}}

        store.get_secret.assert_called_once_with("default", "deploy")
        mock_sleep.assert_called_once_with(0.01)

    @patch("github_operator.utils.secrets.time.sleep")
    def test_visible_after_lag(self, mock_sleep):
        """Not-found reads are retried."""
        store = Mock()
        store.get_secret.side_effect = [NotFoundError("x"), NotFoundError("x"), {"data": {"a": "b"}}]

        assert wait_for_secret(store, "default", "deploy", attempts=10, interval=0.01) == {"data": {"a": "b"}}

        assert store.get_secret.call_count == 3

    @patch("github_operator.utils.secrets.time.sleep")
    def test_gives_up(self, mock_sleep):
        """A Secret that stays invisible raises after the attempt budget."""
        store = Mock()
        store.get_secret.side_effect = NotFoundError("x")

        with pytest.raises(SecretNotVisibleError, match="after 10 fetch attempts"):
            wait_for_secret(store, "default", "deploy", attempts=10, interval=0.01)

        assert store.get_secret.call_count == 10

    @patch("github_operator.utils.secrets.time.sleep")
    def test_other_errors_propagate(self, mock_sleep):
        """Errors other than not-found are not swallowed."""
        store = Mock()
        store.get_secret.side_effect = RuntimeError("api down")

        with pytest.raises(RuntimeError):
            wait_for_secret(store, "default", "deploy")
