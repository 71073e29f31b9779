"""Base class for MarkLogic-backed models.

Usage:
    from marklogic_client.model import Attribute, Model

    class Article(Model):
        title = Attribute("string")
        body = Attribute("text")
        published_on = Attribute("date")

    article = Article.create(title="Hello", body="World")
    found = Article.find(article.uri)
    found.update(title="Hello again")
    found.destroy()
"""

import copy
import logging
import uuid
from typing import Any, ClassVar

from ..client import MarkLogicClient
from ..exceptions import APIError, InvalidArgumentError, RecordNotFound, UnknownAttributeError
from ..types import Format, SearchResults
from .attributes import Attribute

logger = logging.getLogger(__name__)


class Model:
    """A JSON document in MarkLogic mapped to a Python object.

    Subclasses declare ``Attribute`` fields. Instances move from new
    (no URI) to persisted after the first successful ``save()``, and
    back to not persisted after ``destroy()``.
    """

    __schema__: ClassVar[dict[str, Attribute]] = {}
    _db_client: ClassVar[MarkLogicClient | None] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        schema: dict[str, Attribute] = {}
        for base in reversed(cls.__mro__[1:]):
            schema.update(getattr(base, "__schema__", {}))
        for name, value in vars(cls).items():
            if isinstance(value, Attribute):
                schema[name] = value
        cls.__schema__ = schema

    def __init__(self, attributes: dict[str, Any] | None = None, **kwargs: Any):
        values = {**(attributes or {}), **kwargs}
        uri = values.pop("uri", None)
        persisted = bool(values.pop("persisted", False))
        if persisted and uri is None:
            raise InvalidArgumentError("A persisted record requires a uri")

        self._uri: str | None = uri
        self._persisted = persisted
        self._attribute_values: dict[str, Any] = {
            name: attribute.initial_value() for name, attribute in self.__schema__.items()
        }
        self.assign_attributes(values)

        self._previous_changes: dict[str, tuple[Any, Any]] = {}
        self._clear_changes_information()

    # --- Class methods ---

    @classmethod
    def db_client(cls) -> MarkLogicClient:
        """Return the API client for this model, creating one on first use."""
        if cls._db_client is None:
            cls._db_client = MarkLogicClient()
        return cls._db_client

    @classmethod
    def use_client(cls, client: MarkLogicClient | None) -> None:
        """Set the API client for this model and its subclasses."""
        cls._db_client = client

    @classmethod
    def find(cls, uri: str) -> "Model":
        """Load the document at ``uri``.

        Raises:
            RecordNotFound: The server reported 404.
            APIError: Any other API failure, or a body that is not a JSON object.
        """
        try:
            response = cls.db_client().read_document(uri, format=Format.JSON)
        except APIError as e:
            if e.status_code == 404:
                raise RecordNotFound(
                    f"Document not found at URI: {uri}", 404, e.response_body
                ) from e
            raise

        try:
            data = response.json()
        except ValueError as e:
            raise APIError(
                f"Failed to parse JSON response from MarkLogic: {e}", None, response.text
            ) from e
        if not isinstance(data, dict):
            raise APIError(
                "Failed to parse JSON response from MarkLogic: expected an object",
                None,
                response.text,
            )
        return cls._from_document(data, uri)

    @classmethod
    def create(cls, attributes: dict[str, Any] | None = None, **kwargs: Any) -> "Model":
        """Build and save a new record.

        The instance is returned even when the save fails; check
        ``persisted`` to tell.
        """
        instance = cls(attributes, **kwargs)
        instance.save()
        return instance

    @classmethod
    def where(cls, query_string: str, options: dict[str, Any] | None = None) -> list["Model"]:
        """Search and map each match to an instance.

        Matches carrying inline JSON content are built directly. Matches
        with only a URI are loaded with ``find``, one request each.
        Matches without a URI are skipped, as are those that fail to load
        or hold values the attributes cannot cast.
        """
        merged_options = {**(options or {}), "format": Format.JSON.value}
        response = cls.db_client().search(query_string, options=merged_options)

        try:
            results = SearchResults.from_response(response.json())
        except (ValueError, AttributeError) as e:
            raise APIError(
                f"Failed to parse JSON search response: {e}", None, response.text
            ) from e

        instances = []
        for item in results.results:
            if not item.uri:
                continue
            try:
                if item.has_json_content:
                    instances.append(cls._from_document(item.content, item.uri))
                else:
                    instances.append(cls.find(item.uri))
            except (RecordNotFound, APIError, InvalidArgumentError) as e:
                logger.warning("Skipping search result %s: %s", item.uri, e)
        return instances

    @classmethod
    def _from_document(cls, data: dict[str, Any], uri: str | None) -> "Model":
        known = {key: value for key, value in data.items() if key in cls.__schema__}
        return cls(known, uri=uri, persisted=True)

    # --- Attributes ---

    @property
    def uri(self) -> str | None:
        return self._uri

    @property
    def persisted(self) -> bool:
        return self._persisted

    @property
    def new_record(self) -> bool:
        return not self._persisted

    def assign_attributes(self, new_attributes: dict[str, Any] | None) -> None:
        """Set several attributes at once.

        Raises:
            UnknownAttributeError: A key is not a declared attribute.
        """
        if not new_attributes:
            return
        for name, value in new_attributes.items():
            if name not in self.__schema__:
                raise UnknownAttributeError(
                    f"unknown attribute {name!r} for {type(self).__name__}"
                )
            setattr(self, name, value)

    def attributes(self) -> dict[str, Any]:
        """Current value of every declared attribute."""
        return {name: self._attribute_values[name] for name in self.__schema__}

    def attributes_for_persistence(self) -> dict[str, Any]:
        """The document body written on save."""
        return {
            name: attribute.serialize(self._attribute_values[name])
            for name, attribute in self.__schema__.items()
        }

    # --- Persistence ---

    def save(self) -> bool:
        """Write the document, generating a URI for new records.

        Returns:
            True on success, False when the API reports an error.
        """
        if self._uri is None and not self._persisted:
            self._uri = self.generate_uri()

        try:
            self.db_client().write_document(
                self._uri, self.attributes_for_persistence(), format=Format.JSON
            )
        except APIError as e:
            logger.warning("Failed to save %s at %s: %s", type(self).__name__, self._uri, e)
            return False

        self._persisted = True
        self._changes_applied()
        return True

    def update(self, attributes: dict[str, Any] | None = None, **kwargs: Any) -> bool:
        """Assign attributes and save."""
        self.assign_attributes({**(attributes or {}), **kwargs})
        return self.save()

    def destroy(self) -> bool:
        """Delete the document.

        Returns:
            False without contacting the server when the record was never
            persisted, or when the API reports an error; True otherwise.
        """
        if not self._persisted:
            return False

        try:
            self.db_client().delete_document(self._uri)
        except APIError as e:
            logger.warning("Failed to destroy %s at %s: %s", type(self).__name__, self._uri, e)
            return False

        self._persisted = False
        self._changes_applied()
        return True

    def generate_uri(self) -> str:
        """URI for a new record: ``/documents/<class name>/<uuid>.json``."""
        return f"/documents/{type(self).__name__.lower()}/{uuid.uuid4()}.json"

    # --- Change tracking ---

    @property
    def changed(self) -> bool:
        return bool(self.changes)

    @property
    def changed_attributes(self) -> list[str]:
        return list(self.changes)

    @property
    def changes(self) -> dict[str, tuple[Any, Any]]:
        """Changed attributes mapped to ``(old, new)``."""
        return {
            name: (self._original_values[name], value)
            for name, value in self._attribute_values.items()
            if value != self._original_values[name]
        }

    @property
    def previous_changes(self) -> dict[str, tuple[Any, Any]]:
        """Changes applied by the last successful save or destroy."""
        return dict(self._previous_changes)

    def attribute_changed(self, name: str) -> bool:
        self._check_attribute(name)
        return name in self.changes

    def attribute_was(self, name: str) -> Any:
        """Value of ``name`` at the last load, save or destroy."""
        self._check_attribute(name)
        return self._original_values[name]

    def restore_attributes(self) -> None:
        """Discard unsaved changes."""
        self._attribute_values = copy.deepcopy(self._original_values)

    def _check_attribute(self, name: str) -> None:
        if name not in self.__schema__:
            raise UnknownAttributeError(f"unknown attribute {name!r} for {type(self).__name__}")

    def _changes_applied(self) -> None:
        self._previous_changes = self.changes
        self._clear_changes_information()

    def _clear_changes_information(self) -> None:
        self._original_values = copy.deepcopy(self._attribute_values)

    # --- Misc ---

    def __repr__(self) -> str:
        attrs = ", ".join(f"{name}={value!r}" for name, value in self.attributes().items())
        return f"<{type(self).__name__} uri={self._uri!r} persisted={self._persisted} {attrs}>"
