"""qrlogo CLI: render styled QR codes and check that they scan."""

import argparse
import json
import sys
from pathlib import Path

from PIL import Image

from qrlogo.logging import audit, get_logger, setup_logging

log = get_logger("cli")

# argparse dest -> RenderConfig / logo option name
_RENDER_FLAGS = {
    "size": "size",
    "quiet_zone": "quiet_zone",
    "bg_color": "bg_color",
    "fg_color": "fg_color",
    "style": "qr_style",
    "eye_radius": "eye_radius",
    "eye_color": "eye_color",
    "ecc": "ec_level",
    "scale": "scale",
    "id": "output_id",
    "authenticated": "authenticated",
    "logo": "logo_image",
    "logo_width": "logo_width",
    "logo_height": "logo_height",
    "logo_opacity": "logo_opacity",
    "remove_behind_logo": "remove_qr_behind_logo",
    "enable_cors": "enable_cors",
}


def _json_option(text: str):
    """Parse a JSON option value, treating bare words (e.g. a color name) as strings."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def _print_scan_results(results) -> bool:
    all_pass = True
    for r in results:
        status = "PASS" if r.success else "FAIL"
        all_pass = all_pass and r.success
        print(f"  [{r.decoder:12s}] {status} | {r.decode_time_ms:6.1f}ms | {r.decoded_data or r.error}")
    return all_pass


def build_options(args) -> dict:
    """Merge a --config JSON file with explicit flags (flags win)."""
    options: dict = {}
    if args.config:
        with open(args.config) as f:
            options.update(json.load(f))
    for dest, name in _RENDER_FLAGS.items():
        value = getattr(args, dest, None)
        if value is not None and value is not False:
            options[name] = value
    return options


def cmd_render(args):
    """Render a styled QR code."""
    from qrlogo.config import RenderConfig
    from qrlogo.renderer import render_qr

    options = build_options(args)
    value = args.value if args.value is not None else options.get("value")
    if value is None:
        print("error: no value to encode (pass VALUE or a 'value' key in --config)", file=sys.stderr)
        sys.exit(2)

    config = RenderConfig.from_mapping(options)
    output = Path(args.output or f"output/{config.output_id}.png")
    output.parent.mkdir(parents=True, exist_ok=True)

    result = render_qr(value, config, backend=args.encoder)
    result.image.save(output)
    layout = result.layout
    print(f"Generated: {output} ({result.image.size[0]}x{result.image.size[1]})")
    print(f"  Modules: {layout.module_count}x{layout.module_count}, cell {layout.cell_size:.2f}px, "
          f"style {config.qr_style}")
    if result.rgb_key:
        print(f"  Key: {result.rgb_key}")

    if args.verify:
        from qrlogo.verify import verify

        ok = _print_scan_results(verify(result.image, expected_data=value))
        sys.exit(0 if ok else 1)


def cmd_verify(args):
    """Verify that an image decodes."""
    from qrlogo.verify import verify

    img = Image.open(args.image)
    ok = _print_scan_results(verify(img, expected_data=args.expected))
    sys.exit(0 if ok else 1)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="qrlogo", description="Styled QR code renderer with logo overlay")
    parser.add_argument("-V", "--verbose", action="store_true", help="Enable DEBUG-level logging")
    parser.add_argument("--log-file", default=None, help="Write JSON logs to file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- render ---
    p_render = subparsers.add_parser("render", help="Render a QR code")
    p_render.add_argument("value", nargs="?", default=None, help="Text or URL to encode")
    p_render.add_argument("-o", "--output", default=None, help="Output image (default output/<id>.png)")
    p_render.add_argument("-c", "--config", default=None, help="JSON file of render options")
    p_render.add_argument("--encoder", default="qrcode", choices=["qrcode", "segno"], help="Encoder backend")
    p_render.add_argument("-e", "--ecc", default=None, choices=["L", "M", "Q", "H"], help="Error correction level")
    p_render.add_argument("--size", type=float, default=None, help="Body size in pixels (default 150)")
    p_render.add_argument("--quiet-zone", type=float, default=None, help="Quiet zone in pixels (default 10)")
    p_render.add_argument("--bg-color", default=None, help="Background color (default #FFFFFF)")
    p_render.add_argument("--fg-color", default=None, help="Module color (default #000000)")
    p_render.add_argument("--style", default=None, choices=["squares", "dots"], help="Module style")
    p_render.add_argument("--eye-radius", type=_json_option, default=None,
                          help="Eye corner radius as JSON, e.g. '[0, [4,4,4,4], {\"inner\": 2, \"outer\": 0}]'")
    p_render.add_argument("--eye-color", type=_json_option, default=None,
                          help="Eye color as JSON or a plain color, e.g. '[\"#000\", \"#F00\", \"#00F\"]'")
    p_render.add_argument("--scale", type=float, default=None, help="Device pixel ratio (default 1)")
    p_render.add_argument("--id", default=None, help="Output identifier")
    p_render.add_argument("--authenticated", action="store_true", help="Embed the payload key marker")
    p_render.add_argument("--logo", default=None, help="Logo path, URL or data: URI")
    p_render.add_argument("--logo-width", type=float, default=None, help="Logo width in pixels")
    p_render.add_argument("--logo-height", type=float, default=None, help="Logo height in pixels")
    p_render.add_argument("--logo-opacity", type=float, default=None, help="Logo opacity 0-1")
    p_render.add_argument("--remove-behind-logo", action="store_true", help="Do not draw modules under the logo")
    p_render.add_argument("--enable-cors", action="store_true", help="Fetch a remote logo in anonymous CORS mode")
    p_render.add_argument("--verify", action="store_true", help="Decode the result and fail if it does not scan")

    # --- verify ---
    p_ver = subparsers.add_parser("verify", help="Verify a QR code image")
    p_ver.add_argument("image", help="Path to QR code image")
    p_ver.add_argument("--expected", default=None, help="Expected decoded data (fails if mismatch)")

    return parser


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(level="DEBUG" if args.verbose else "INFO", log_file=args.log_file)
    audit("cli.start", logger=log, command=args.command, verbose=args.verbose)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    commands = {
        "render": cmd_render,
        "verify": cmd_verify,
    }
    commands[args.command](args)
    audit("cli.done", logger=log, command=args.command)


if __name__ == "__main__":
    main()
