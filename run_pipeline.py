#!/usr/bin/env python3
"""
Contract Generation Runner
Requirements → category → prompts → LLM → sanitized Solidity

Usage:
    1. Edit the USER_INPUT variable below with your contract description
    2. Run: python run_pipeline.py
"""

import asyncio
import json
import os
import sys
from datetime import datetime

from contract_generator import ContractGenerationError, ContractGenerator, load_settings
from contract_generator.api import contract_types, handle_generate, health


# ============================================================================
# USER INPUT - Edit this variable with your contract description
# ============================================================================
USER_INPUT = """
Create a utility token with 1,000,000 supply called FooCoin (FOO).
The owner can mint new tokens and holders can burn their own tokens.
"""

# Optional structured hints sent alongside the requirements
OPTIONS = {
    # "name": "FooCoin",
    # "symbol": "FOO",
    # "initialSupply": "1000000",
    # "features": ["burnable", "pausable"],
}


def run_generation(payload: dict, identity: str = "cli", debug: bool = True, output_root: str = "pipeline_outputs"):
    """
    Run one generation request and save the outputs.

    Returns:
        The response body, or None if generation failed.
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    outdir = os.path.join(output_root, timestamp)

    generator = ContractGenerator(debug=debug)

    print("\n[1/2] Generating contract...")
    print("-" * 80)
    status, body = asyncio.run(handle_generate(payload, identity, generator))

    if not body.get("success"):
        error = body.get("error", {})
        print(f"❌ Generation Failed [{status}] {error.get('kind')}: {error.get('message')}")
        return None

    data = body["data"]
    print(f"✅ Generated {data['category']} contract")

    # ------------------------------------------------------------------
    # Save outputs
    # ------------------------------------------------------------------
    print("\n[2/2] Saving outputs...")
    print("-" * 80)
    os.makedirs(outdir, exist_ok=True)

    contract_name = payload.get("options", {}).get("name") or "Contract"
    sol_path = os.path.join(outdir, f"{contract_name}.sol")
    meta_path = os.path.join(outdir, "metadata.json")

    with open(sol_path, "w") as f:
        f.write(data["artifact"])

    with open(meta_path, "w") as f:
        json.dump({"category": data["category"], **data["metadata"]}, f, indent=2)

    print(f"📦 Outputs saved:")
    print(f"   • Solidity: {sol_path}")
    print(f"   • Metadata: {meta_path}")

    # Show contract preview
    lines = data["artifact"].split("\n")
    print(f"\n📄 Contract Preview (first 20 lines):")
    for i, line in enumerate(lines[:20], 1):
        print(f"   {i:3d} | {line}")
    if len(lines) > 20:
        print(f"   ... ({len(lines) - 20} more lines)")

    return body


def main():
    """Main entry point"""
    import argparse

    parser = argparse.ArgumentParser(
        description="Generate a Solidity contract from natural-language requirements",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Use USER_INPUT variable from file (default)
  python run_pipeline.py

  # Override with command-line input and force a category
  python run_pipeline.py --input "Create a staking pool with rewards" --category defi

  # List categories / check provider configuration
  python run_pipeline.py --list-types
  python run_pipeline.py --health
        """
    )
    parser.add_argument("--input", "-i", type=str, help="Override USER_INPUT variable with command-line input")
    parser.add_argument("--category", "-c", type=str, help="Explicit contract category (skips detection)")
    parser.add_argument("--name", type=str, help="Contract name hint")
    parser.add_argument("--symbol", type=str, help="Token symbol hint")
    parser.add_argument("--supply", type=str, help="Initial supply hint")
    parser.add_argument("--feature", action="append", default=[], help="Additional feature (repeatable)")
    parser.add_argument("--output-dir", type=str, default="pipeline_outputs", help="Where to save outputs")
    parser.add_argument("--quiet", action="store_true", help="Only print the result")
    parser.add_argument("--list-types", action="store_true", help="Print the supported categories and exit")
    parser.add_argument("--health", action="store_true", help="Print provider configuration status and exit")

    args = parser.parse_args()

    if args.list_types:
        _, body = contract_types()
        print(json.dumps(body, indent=2))
        return

    if args.health:
        _, body = health(load_settings())
        print(json.dumps(body, indent=2))
        return

    try:
        user_input = args.input if args.input else USER_INPUT
        if not user_input or not user_input.strip():
            print("❌ USER_INPUT is empty. Please edit the USER_INPUT variable in run_pipeline.py")
            print("   Or use --input flag: python run_pipeline.py --input 'Your description'")
            sys.exit(1)

        options = dict(OPTIONS)
        if args.name:
            options["name"] = args.name
        if args.symbol:
            options["symbol"] = args.symbol
        if args.supply:
            options["initialSupply"] = args.supply
        if args.feature:
            options["features"] = args.feature

        payload = {"requirements": user_input.strip(), "options": options}
        if args.category:
            payload["category"] = args.category

        print("\n" + "=" * 80)
        print("SMART CONTRACT GENERATOR")
        print("=" * 80)
        print(f"\n📝 Input: {user_input.strip()}")

        result = run_generation(payload, debug=not args.quiet, output_root=args.output_dir)

        if result is None:
            print("\n❌ Generation failed. Check errors above.")
            sys.exit(1)

        print("\n" + "=" * 80)
        print("✅ Generation completed successfully!")
        print("=" * 80)

    except ContractGenerationError as e:
        print(f"\n❌ {e.kind}: {e.message}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n\n⚠️  Generation cancelled by user")
        sys.exit(0)


if __name__ == "__main__":
    main()
