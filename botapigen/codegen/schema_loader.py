"""Loading of bot API specifications from files and URLs.

JSON documents go through ``schema.parse``. YAML documents are decoded with a
loader that rejects repeated keys and handed to ``schema.parse_document``, so
duplicate names are detected in both formats.
"""

import logging
from collections.abc import Hashable
from pathlib import Path
from urllib.parse import urlparse

import httpx
import yaml

from botapigen.codegen.schema import Spec, parse, parse_document
from botapigen.exceptions import MalformedSchemaError, SpecLoadError

__all__ = ['SpecLoader']

logger = logging.getLogger(__name__)


class _UniqueKeyLoader(yaml.SafeLoader):
    """``SafeLoader`` that rejects a key repeated within one mapping."""

    def construct_mapping(self, node, deep=False):
        self.flatten_mapping(node)
        seen = set()
        for key_node, _ in node.value:
            key = self.construct_object(key_node, deep=deep)
            if isinstance(key, Hashable) and key in seen:
                raise MalformedSchemaError(f'duplicate key {key!r}')
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


class SpecLoader:
    """Loads specifications from URLs or file paths.

    Example:
        >>> loader = SpecLoader()
        >>> spec = loader.load('https://example.com/bot-api.json')
        >>> # or
        >>> spec = loader.load('./api.yaml')
    """

    def __init__(
        self,
        http_client: httpx.Client | None = None,
        base_path: str | Path | None = None,
    ):
        """Initialize the loader.

        Args:
            http_client: Optional HTTP client to use for URL requests.
            base_path: Base path for resolving relative file paths.
                      Defaults to current working directory.
        """
        self._http_client = http_client
        self._base_path = Path(base_path) if base_path else Path.cwd()

    def load(self, source: str) -> Spec:
        """Load and parse a specification.

        Raises:
            SpecLoadError: If the content cannot be read from the source.
            MalformedSchemaError: If the content does not match the data model.
            UnknownTypeError: If the specification references undeclared types.
        """
        if self._is_url(source):
            text = self._load_from_url(source)
        else:
            text = self._load_from_file(source)

        logger.debug('Loaded %d bytes from %s', len(text), source)
        return self.loads(text, yaml_format=self._is_yaml(source))

    def loads(self, text: str, yaml_format: bool = False) -> Spec:
        """Parse specification text that was obtained elsewhere."""
        if not yaml_format:
            return parse(text)
        try:
            document = yaml.load(text, Loader=_UniqueKeyLoader)
        except yaml.YAMLError as e:
            raise MalformedSchemaError(f'invalid YAML: {e}') from e
        return parse_document(document)

    def _is_url(self, text: str) -> bool:
        try:
            result = urlparse(text)
            return result.scheme in ('http', 'https')
        except ValueError:
            return False

    def _is_yaml(self, source: str) -> bool:
        return urlparse(source).path.lower().endswith(('.yaml', '.yml'))

    def _load_from_url(self, url: str) -> str:
        try:
            if self._http_client:
                response = self._http_client.get(url)
            else:
                response = httpx.get(url, follow_redirects=True, timeout=30.0)
            response.raise_for_status()
            return response.text
        except httpx.HTTPError as e:
            raise SpecLoadError(url, cause=e) from e

    def _load_from_file(self, file_path: str) -> str:
        path = Path(file_path)
        if not path.is_absolute():
            path = self._base_path / path

        if not path.exists():
            raise SpecLoadError(
                str(file_path), cause=FileNotFoundError(f'File not found: {path}')
            )

        try:
            return path.read_text(encoding='utf-8')
        except OSError as e:
            raise SpecLoadError(str(file_path), cause=e) from e
