"""
Secret and Profile Values
=========================

The preprocessor can expand `$<secret:...>` and `$<profile:...>`
references through an optional ProfileClient supplied by the caller.
Nothing is looked up unless such a reference is actually expanded, so a
reader without a client works normally until it meets one.

Item Types
----------
secret
    Named groups of properties, often kept in a password manager and
    optionally partitioned by source (a vault, for example). A reference
    selects the 'password' property unless another one is given with
    NAME[PROPERTY].

profile
    Plain name/value pairs describing the user, workstation or
    environment (test endpoints for a CI runner, for example).

Profile File Format
-------------------
DictProfileClient.from_file() reads a JSON document:

    {
        "profile": {"region": "us-west-2"},
        "secrets": {"db": {"username": "app", "password": "hunter2"}},
        "sources": {"ops-vault": {"db": {"password": "s3cret"}}}
    }
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from linepp.errors import ProfileNotFoundError, ProfileUnavailableError
from linepp.variables import DEFAULT_SECRET_PROPERTY

logger = logging.getLogger(__name__)


class ProfileClient(ABC):
    """
    Capability interface for resolving secrets and profile values.

    Implementations must raise ProfileNotFoundError when the item does not
    exist and ProfileUnavailableError when the backing store cannot be
    reached. Implementations shared between readers must be safe for
    concurrent use.
    """

    @abstractmethod
    def get_secret_value(
        self,
        name: str,
        property: str = DEFAULT_SECRET_PROPERTY,
        source: Optional[str] = None,
    ) -> str:
        """Return one property of a named secret."""

    @abstractmethod
    def get_profile_value(self, name: str) -> str:
        """Return a named profile value."""


class DictProfileClient(ProfileClient):
    """
    In-memory ProfileClient.

    Attributes:
        secrets: {secret_name: {property: value}} for the default source
        profile: {name: value}
        sources: {source: {secret_name: {property: value}}}
    """

    def __init__(
        self,
        secrets: Optional[dict] = None,
        profile: Optional[dict] = None,
        sources: Optional[dict] = None,
    ):
        self.secrets = secrets or {}
        self.profile = profile or {}
        self.sources = sources or {}

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "DictProfileClient":
        """
        Load secrets and profile values from a JSON file.

        Raises:
            ProfileUnavailableError: If the file cannot be read or parsed
        """
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ProfileUnavailableError(f"cannot load profile file '{path}': {e}") from e

        if not isinstance(data, dict):
            raise ProfileUnavailableError(f"profile file '{path}' must contain a JSON object")

        client = cls(
            secrets=data.get("secrets"),
            profile=data.get("profile"),
            sources=data.get("sources"),
        )
        logger.debug(
            f"Loaded profile file {path}: {len(client.secrets)} secrets, "
            f"{len(client.profile)} profile values, {len(client.sources)} sources"
        )
        return client

    def get_secret_value(
        self,
        name: str,
        property: str = DEFAULT_SECRET_PROPERTY,
        source: Optional[str] = None,
    ) -> str:
        if source is None:
            secrets = self.secrets
        else:
            if source not in self.sources:
                raise ProfileNotFoundError(f"secret source [{source}] does not exist")
            secrets = self.sources[source]

        secret = secrets.get(name)
        if secret is None:
            where = f" in source [{source}]" if source else ""
            raise ProfileNotFoundError(f"secret [{name}] does not exist{where}")

        if isinstance(secret, str):
            # Bare string secrets only carry a password
            if property != DEFAULT_SECRET_PROPERTY:
                raise ProfileNotFoundError(f"secret [{name}] has no [{property}] property")
            return secret

        if property not in secret:
            raise ProfileNotFoundError(f"secret [{name}] has no [{property}] property")
        return str(secret[property])

    def get_profile_value(self, name: str) -> str:
        if name not in self.profile:
            raise ProfileNotFoundError(f"profile value [{name}] does not exist")
        return str(self.profile[name])
