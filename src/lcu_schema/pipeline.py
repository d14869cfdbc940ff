"""Raw catalog in, document and declarations out."""

from lcu_schema.catalog.base import RawCatalog
from lcu_schema.catalog.normalize import normalize
from lcu_schema.diagnostics import Diagnostics
from lcu_schema.generator.document import DEFAULT_TITLE, Document, build_document
from lcu_schema.generator.typescript import Declarations, emit


def translate(
    raw: RawCatalog, namespace: str | None = None, title: str = DEFAULT_TITLE
) -> tuple[Document, Declarations]:
    diagnostics = Diagnostics()
    catalog = normalize(raw, diagnostics)
    document = build_document(catalog, diagnostics, title=title)
    return document, emit(document, namespace)
