"""
Rule Sources - Discover and parse rule documents
================================================

A rule document is a list of records::

    [
      // comments are tolerated
      {"match": ["hello world", "hi there"], "response": "Hello {player_name}!"}
    ]

Documents may be JSON or YAML and live anywhere below the root
directory. A mapping with a ``rules`` list is accepted as well.
"""

import json
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Optional, Protocol, Sequence

import yaml

from core.exceptions import RuleLoadError
from core.logging import get_logger
from .defaults import default_rule_document, default_rules
from .record import RuleRecord

logger = get_logger("rules.loader", component="documents")

DEFAULT_SUFFIXES = (".json", ".yaml", ".yml")

# String literals are matched first so comment markers inside them survive
_JSON_COMMENT = re.compile(
    r'(?P<string>"(?:\\.|[^"\\])*")|//[^\n]*|#[^\n]*|/\*.*?\*/',
    re.DOTALL
)


def strip_json_comments(text: str) -> str:
    """Remove ``//``, ``#`` and ``/* */`` comments outside string literals."""
    return _JSON_COMMENT.sub(lambda m: m.group("string") or "", text)


class DocumentNode(Protocol):
    """The slice of ``pathlib.Path`` the tree walk relies on."""

    name: str

    def is_dir(self) -> bool: ...

    def iterdir(self) -> Iterator["DocumentNode"]: ...

    def read_text(self, encoding: Optional[str] = None) -> str: ...


class RuleSource(ABC):
    """Anything that yields rule records."""

    @abstractmethod
    def load(self) -> List[RuleRecord]:
        """Return every record this source provides, in load order."""


class InMemoryRuleSource(RuleSource):
    """Records supplied directly by the host or an addon."""

    def __init__(self, records: Iterable[Any]):
        self._records = [
            r if isinstance(r, RuleRecord) else RuleRecord.from_dict(r)
            for r in records
        ]

    def load(self) -> List[RuleRecord]:
        return list(self._records)


class CompositeRuleSource(RuleSource):
    """Concatenation of several sources, in the order given."""

    def __init__(self, *sources: RuleSource):
        self.sources = list(sources)

    def load(self) -> List[RuleRecord]:
        records: List[RuleRecord] = []
        for source in self.sources:
            records.extend(source.load())
        return records


def walk_documents(root: DocumentNode, suffixes: Sequence[str] = DEFAULT_SUFFIXES) -> List[DocumentNode]:
    """
    List rule documents below ``root``, depth first, in name order.

    Uses an explicit stack, so deep trees cannot exhaust the
    interpreter's recursion limit.
    """
    suffixes = tuple(s.lower() for s in suffixes)
    documents = []
    stack = [root]

    while stack:
        node = stack.pop()
        try:
            children = sorted(node.iterdir(), key=lambda child: child.name)
        except OSError as e:
            logger.warning(f"Cannot list rule directory {node}: {e}")
            continue

        subdirs = []
        for child in children:
            if child.is_dir():
                subdirs.append(child)
            elif child.name.lower().endswith(suffixes):
                documents.append(child)

        # Reversed so the alphabetically first directory is popped first
        stack.extend(reversed(subdirs))

    return documents


def parse_document(text: str, source: str = "<string>") -> List[RuleRecord]:
    """
    Parse one rule document.

    The text is first read as JSON with ``//``, ``#`` and ``/* */``
    comments removed. If that fails, the untouched text is read as
    YAML, which has its own ``#`` comments and allows unquoted keys.
    Malformed records inside an otherwise valid document are skipped
    with a warning.

    Raises:
        RuleLoadError: If the document cannot be parsed or is not a
            list of rules
    """
    json_text = strip_json_comments(text)
    if not json_text.strip():
        return []

    try:
        data = json.loads(json_text)
    except ValueError:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise RuleLoadError(f"Invalid rule document: {e}", {"document": source})

    if data is None:
        return []

    if isinstance(data, dict) and "rules" in data:
        data = data["rules"]

    if not isinstance(data, list):
        raise RuleLoadError(
            f"Rule document must be a list, got {type(data).__name__}",
            {"document": source}
        )

    records = []
    for position, entry in enumerate(data):
        try:
            records.append(RuleRecord.from_dict(entry))
        except RuleLoadError as e:
            logger.warning(f"Skipping rule #{position} in {source}: {e}", extra={"source": source})
    return records


class FileRuleSource(RuleSource):
    """
    Rules read from a directory tree.

    If the root is missing or empty, a default document is written
    there first. The write is best effort; when it fails the built-in
    default rules are served from memory.

    Example:
        source = FileRuleSource("~/.config/rule-responder/rules")
        records = source.load()
    """

    def __init__(
        self,
        root,
        suffixes: Sequence[str] = DEFAULT_SUFFIXES,
        default_document: str = "data.json",
        write_default: bool = True
    ):
        self.root = Path(root).expanduser()
        self.suffixes = tuple(suffixes)
        self.default_document = default_document
        self.write_default = write_default

    def load(self) -> List[RuleRecord]:
        """
        Load every document below the root.

        A document that fails to parse is logged and skipped; the
        rest still load.
        """
        if self._is_empty():
            if not self._seed_default():
                logger.info("Serving built-in default rules from memory")
                return default_rules()

        records: List[RuleRecord] = []
        documents = walk_documents(self.root, self.suffixes)

        for document in documents:
            try:
                text = document.read_text(encoding="utf-8")
                records.extend(parse_document(text, source=str(document)))
            except (OSError, UnicodeDecodeError, RuleLoadError) as e:
                logger.warning(f"Failed to load rule document {document}: {e}", extra={"source": str(document)})

        logger.info(f"Loaded {len(records)} rules from {len(documents)} documents under {self.root}")
        return records

    def _is_empty(self) -> bool:
        if not self.root.exists():
            return True
        if not self.root.is_dir():
            return False
        return next(self.root.iterdir(), None) is None

    def _seed_default(self) -> bool:
        """Write the default document; returns False when nothing was written."""
        if not self.write_default:
            return False

        path = self.root / self.default_document
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                if path.suffix.lower() == ".json":
                    json.dump(default_rule_document(), f, indent=2, ensure_ascii=False)
                else:
                    yaml.safe_dump(default_rule_document(), f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            logger.warning(f"Failed to write default rules to {path}: {e}")
            return False

        logger.info(f"Created default rule document at {path}")
        return True
