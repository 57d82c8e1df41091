"""
declkit Integration

Config-driven entry points: parse the processed API document, render the
declarations, and assemble the final file. The whole output is built in memory,
so a fatal error never leaves partial output behind.
"""

import json
import logging
from pathlib import Path
from datetime import datetime
from collections.abc import Mapping
from typing import Any, Optional, Union

from pydantic import ValidationError

from declkit.core.errors import SchemaError
from declkit.core.schema import ApiDocument
from declkit.core.config import DeclkitConfig


logger = logging.getLogger(__name__)


def load_api_document(data: Union[str, bytes, Mapping, ApiDocument]) -> ApiDocument:
    """
    Parse the input envelope `{"api": {...}}`.

    Raises:
        SchemaError: if the text is not JSON or the document is malformed
    """
    if isinstance(data, ApiDocument):
        return data

    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise SchemaError(f"input is not valid JSON: {e}") from e

    try:
        return ApiDocument.model_validate(data)
    except ValidationError as e:
        raise SchemaError(f"malformed API document: {e}") from e


def generate_declarations(
    api_data: Any,
    config: Optional[DeclkitConfig] = None,
    verbose: bool = False,
    generated_on: Optional[datetime] = None,
) -> str:
    """
    Generate the complete declaration file for an API document.

    Args:
        api_data: JSON text, a decoded mapping, or an ApiDocument
        config: declkit configuration (defaults when omitted)
        verbose: Enable detailed logging output
        generated_on: Timestamp to embed (defaults to now when timestamps are enabled)

    Returns:
        Preamble, timestamp comment and declarations as one string

    Raises:
        RenderError: on any malformed schema construct
        ValueError: if the preamble cannot be read
    """
    from declkit.generators.typescript.pipeline import render_api, load_preamble, assemble_output

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s: %(message)s')

    config = config or DeclkitConfig()
    document = load_api_document(api_data)

    logger.debug(f"Root namespace: {config.rootNamespace}")
    logger.debug(f"Namespaces in input: {len(document.api)}")

    body = render_api(
        document,
        overrides=config.build_overrides(),
        root_namespace=config.rootNamespace,
        docs_base_url=config.docsBaseUrl,
    )
    preamble = load_preamble(config.preamble)

    if config.timestamp:
        generated_on = generated_on or datetime.now().astimezone()
    else:
        generated_on = None

    return assemble_output(preamble, body, generated_on)


def generate_from_json(
    input_path: str,
    output_path: Optional[str] = None,
    config: Optional[DeclkitConfig] = None,
    verbose: bool = False,
) -> str:
    """
    Generate declarations from a schema file, optionally writing the result.

    The output file is only written once rendering has fully succeeded.
    """
    path = Path(input_path)
    try:
        raw = path.read_text(encoding='utf-8')
    except OSError as e:
        raise ValueError(f"Failed to read API schema from {path}: {e}")

    output = generate_declarations(raw, config=config, verbose=verbose)

    if output_path:
        target = Path(output_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(output, encoding='utf-8')
        logger.info(f"Wrote declarations to {target}")

    return output
