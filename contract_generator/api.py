"""Transport-neutral request handlers.

Each handler returns ``(status, body)`` where ``body`` is JSON-serializable,
so any HTTP framework (or the CLI runner) can sit in front of them.
"""

from __future__ import annotations

import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from . import __version__
from .categories import ContractCategory
from .config import GeneratorSettings
from .errors import ContractGenerationError
from .generator import ContractGenerator
from .template_loader import CategoryTemplate, load_category_registry

Response = Tuple[int, Dict]


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def error_response(error: ContractGenerationError) -> Response:
    return error.status, {"success": False, "error": error.to_dict()}


async def handle_generate(payload: Any, identity: str, generator: ContractGenerator) -> Response:
    """POST /api/generate

    Never raises: every failure becomes a ``{success: false, error}`` body.
    """
    try:
        artifact = await generator.generate_from_payload(payload, identity or "unknown")
    except ContractGenerationError as e:
        print(f"❌ Contract generation failed ({e.kind}): {e.message}")
        return error_response(e)
    except Exception as e:
        print(f"❌ Contract generation error: {e}")
        traceback.print_exc()
        return 500, {
            "success": False,
            "error": {"message": f"Contract generation failed: {e}", "kind": "GenerationError"},
        }

    print(f"✅ Contract generated successfully ({len(artifact.source)} characters)")
    return 200, {"success": True, "data": artifact.to_response_dict()}


def contract_types(registry: Optional[Dict[ContractCategory, CategoryTemplate]] = None) -> Response:
    """GET /api/types"""
    templates = registry if registry is not None else load_category_registry()
    types = [templates[category].to_dict() for category in ContractCategory if category in templates]
    return 200, {
        "success": True,
        "data": types,
        "total": len(types),
        "timestamp": _timestamp(),
    }


def health(settings: GeneratorSettings) -> Response:
    """GET /api/health"""
    provider = settings.providers.get(settings.provider)
    return 200, {
        "status": "OK",
        "timestamp": _timestamp(),
        "version": __version__,
        "services": {
            "llm": {
                "provider": settings.provider,
                "configured": bool(provider and provider.configured),
            },
        },
    }
