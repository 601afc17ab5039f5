import argparse
import json
import os

from .errors import ConfigError

DEFAULT_CONFIG = "pipeline"
PROGRAM_DIR = "programs"
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
ENGINES = ("stepwise", "closed-form", "both")

DEFAULTS = {
    "program_file": "instructions.txt",
    "output_dir": ".",
    "timeline_csv": "pipeline_timeline.csv",
    "cycles_csv": "pipeline_cycles.csv",
    "html_output": "pipeline_view.html",
    "vcd_output": "pipeline_trace.vcd",
    "clock_period_ns": 10,
    "engine": "both",
    "write_html": True,
    "write_vcd": True,
    "trace": False,
}


def build_parser():
    parser = argparse.ArgumentParser(description="Cycle timing of a 5-stage no-forwarding pipeline for add/sub/mov programs.")
    parser.add_argument("program_file", nargs="?", default=None, help="Optional: instruction file (default from config: instructions.txt).")
    parser.add_argument("-c", "--config", default=None, help=f"Optional: name of the JSON config file (default: {DEFAULT_CONFIG}).")
    parser.add_argument("--engine", choices=ENGINES, default=None, help="Timing engine to run; 'both' cross-checks them.")
    parser.add_argument("-o", "--output-dir", default=None, help="Directory for CSV/HTML/VCD outputs.")
    parser.add_argument("--trace", action="store_true", help="Print the cycle-by-cycle trace.")
    parser.add_argument("--trace-window", metavar="m:n", default=None, help="Only trace cycles m..n (implies --trace).")
    parser.add_argument("--no-html", action="store_true", help="Skip the HTML view.")
    parser.add_argument("--no-vcd", action="store_true", help="Skip the VCD waveform.")
    parser.add_argument("--open", action="store_true", help="Open the HTML view in a browser.")
    return parser


def parse_trace_window(text):
    try:
        start, end = (int(part) for part in text.split(":"))
    except ValueError:
        raise ConfigError(f"Trace window must look like m:n, got '{text}'.") from None
    if start > end:
        raise ConfigError(f"Trace window start {start} is after end {end}.")
    return start, end


def resolve_config_file(name):
    if not name.endswith(".json"):
        name += ".json"
    candidates = [
        name,
        os.path.join("configs", name),
        os.path.join("configs", os.path.basename(name)),
        os.path.join(REPO_ROOT, "configs", os.path.basename(name)),
    ]
    for p in candidates:
        if os.path.exists(p):
            return p
    return None


def load_config_file(path) -> dict:
    """Load a JSON config and check its keys against the defaults."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Error loading config '{path}': {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("Config must be an object/dict at the top level.")

    unknown = sorted(set(data) - set(DEFAULTS))
    for key in unknown:
        print(f"⚠️  Ignoring unknown config key '{key}'.")
        data.pop(key)
    if data.get("engine", "both") not in ENGINES:
        raise ConfigError(f"Config engine must be one of {ENGINES}, got '{data['engine']}'.")
    period = data.get("clock_period_ns", DEFAULTS["clock_period_ns"])
    if isinstance(period, bool) or not isinstance(period, int) or period <= 0:
        raise ConfigError(f"Config clock_period_ns must be a positive integer, got {period!r}.")
    for key in ("write_html", "write_vcd", "trace"):
        if not isinstance(data.get(key, DEFAULTS[key]), bool):
            raise ConfigError(f"Config {key} must be true or false, got {data[key]!r}.")
    return data


def resolve_program_file(program_file):
    possible_paths = [
        program_file,
        program_file + ".txt",
        os.path.join(PROGRAM_DIR, program_file),
        os.path.join(PROGRAM_DIR, program_file + ".txt"),
    ]
    for p in possible_paths:
        if os.path.exists(p):
            return p
    raise ConfigError(f"Could not find '{program_file}'. Checked locations: {possible_paths}")


def load_config(argv=None):
    args = build_parser().parse_args(argv)

    # --- 1. Resolve Config File ---
    cfg = dict(DEFAULTS)
    config_name = args.config or DEFAULT_CONFIG
    config_file = resolve_config_file(config_name)
    if config_file:
        print(f"⚙️  Using Configuration: {config_file}")
        cfg.update(load_config_file(config_file))
    elif args.config:
        raise ConfigError(f"Config file '{args.config}' not found.")
    else:
        print("⚙️  No config file found, using built-in defaults.")

    # --- 2. Command line overrides ---
    if args.program_file:
        cfg["program_file"] = args.program_file
    if args.engine:
        cfg["engine"] = args.engine
    if args.output_dir:
        cfg["output_dir"] = args.output_dir
    if args.no_html:
        cfg["write_html"] = False
    if args.no_vcd:
        cfg["write_vcd"] = False
    cfg["trace_window"] = None
    if args.trace_window:
        cfg["trace_window"] = parse_trace_window(args.trace_window)
        cfg["trace"] = True
    elif args.trace:
        cfg["trace"] = True
    cfg["open_browser"] = args.open
    cfg["config_path"] = config_file

    # --- 3. Resolve paths ---
    cfg["program_path"] = resolve_program_file(cfg["program_file"])
    out = cfg["output_dir"]
    for key in ("timeline_csv", "cycles_csv", "html_output", "vcd_output"):
        cfg[key] = os.path.join(out, cfg[key])
    return cfg
