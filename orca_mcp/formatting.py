"""Human-readable text for tool responses."""

import json

from orca_mcp.client import HUNT_API_VERSION
from orca_mcp.models import HuntDocument, HuntSearchResult
from orca_mcp.settings import (
    CONFIG_FILENAME,
    DEFAULT_API_URL,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT_MS,
    ENV_API_TOKEN,
    ENV_API_URL,
    ENV_RETRIES,
    ENV_TIMEOUT,
    ENV_TOOLS_HUNT,
    Settings,
)

RAW_DATA_PREVIEW_CHARS = 200
_RULE = "═" * 50


def format_context(settings: Settings | None) -> str:
    """Describe the resolved configuration, or explain how to provide one."""
    if settings is None:
        return (
            "❌ No Orca AI configuration found!\n\n"
            f"Please create a '{CONFIG_FILENAME}' file in your current directory "
            "or set the required environment variables:\n\n"
            "Required:\n"
            f"- {ENV_API_TOKEN}: Your Orca AI API key (40 alphanumeric characters)\n\n"
            "Optional:\n"
            f"- {ENV_API_URL}: Orca API URL (default: {DEFAULT_API_URL})\n"
            f"- {ENV_TIMEOUT}: Request timeout in milliseconds (default: {DEFAULT_TIMEOUT_MS})\n"
            f"- {ENV_RETRIES}: Number of retries (default: {DEFAULT_MAX_RETRIES})\n"
            f"- {ENV_TOOLS_HUNT}: Set to 'false' to disable HUNT search"
        )

    return (
        "✅ Orca AI Configuration Detected!\n\n"
        f"API URL: {settings.api_url}\n"
        f"Timeout: {settings.timeout_ms}ms\n"
        f"Retries: {settings.max_retries}\n\n"
        "Enabled Tools:\n"
        f"- HUNT Search: {'✅' if settings.hunt_enabled else '❌'}"
    )


def _format_document(index: int, document: HuntDocument) -> str:
    lines = [f"\n🔸 Record {index}:"]
    if document.primary_name:
        lines.append(f"   Primary Name: {document.primary_name}")
    if document.names:
        lines.append(f"   Known Names: {', '.join(document.names)}")
    if document.dataset is not None:
        dataset = document.dataset
        source = dataset.exact_list_name or dataset.section or "Unknown"
        lines.append(f"   Source Dataset: {source}")
        if dataset.authorities:
            lines.append(f"   Authorities: {', '.join(dataset.authorities)}")
    if document.raw_data:
        preview = document.raw_data
        if len(preview) > RAW_DATA_PREVIEW_CHARS:
            preview = f"{preview[:RAW_DATA_PREVIEW_CHARS]}..."
        lines.append(f"   Details: {preview}")
    if document.values:
        lines.append(f"   Key Values: {', '.join(document.values)}")
    if document.tabular_data is not None and document.tabular_data.headers:
        lines.append(f"   Structured Data: {len(document.tabular_data.headers)} fields available")
    return "\n".join(lines) + "\n"


def format_hunt_results(result: HuntSearchResult) -> str:
    """Summarize a page of HUNT results followed by the complete JSON."""
    documents = result.hunt_documents
    output = f'🔍 HUNT Search Results for "{result.query}"\n'
    output += f"📊 Found {len(documents)} records using API {HUNT_API_VERSION}\n"

    if result.next_token:
        output += (
            "\n\n📄 More results available. "
            f'Use nextToken: "{result.next_token}" to retrieve the next page.'
        )

    if not documents:
        return output + "\n\n❌ No records found for this search query."

    output += f"\n\n📋 Records Found:\n{_RULE}\n"
    separator = "   " + "-" * 40 + "\n"
    output += separator.join(
        _format_document(index, document) for index, document in enumerate(documents, start=1)
    )
    output += f"\n\n📄 Complete Data (JSON):\n{_RULE}\n"
    output += json.dumps(result.to_payload(), indent=2, ensure_ascii=False)
    return output
