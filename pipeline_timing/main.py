import os
import sys
import webbrowser

from . import config
from . import html_view
from . import program_reader
from . import report
from . import simulation
from . import timing
from . import vcd_export
from . import verify
from .errors import ConfigError, EmptyProgramError, EngineMismatchError, ParseError

EXIT_CONFIG = 1
EXIT_PARSE = 2
EXIT_MISMATCH = 3
EXIT_EMPTY = 4
EXIT_OUTPUT = 5


def fail(message, code):
    print(f"❌ {message}", file=sys.stderr)
    sys.exit(code)


def run_engines(program, engine):
    """Returns (stepwise_result_or_None, result_to_report)."""
    stepwise = closed = None
    if engine in ("stepwise", "both"):
        print("🧠 Simulating pipeline cycle by cycle...")
        stepwise = simulation.simulate(program)
    if engine in ("closed-form", "both"):
        print("🧮 Computing closed-form timing...")
        closed = timing.compute_timing(program)
    if stepwise and closed:
        verify.check_agreement(stepwise, closed)
        print("✅ Stepwise and closed-form timing agree.")
    return stepwise, stepwise or closed


def print_trace(sim_result, program, window=None):
    print("\nStarting cycle-by-cycle trace (no-forwarding model)")
    for snap in sim_result.snapshots:
        if window and not window[0] <= snap.cycle <= window[1]:
            continue
        for line in report.trace_lines(snap, program):
            print(line)


def write_outputs(cfg, program, stepwise, result):
    out_dir = cfg["output_dir"]
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)

    report.write_timing_csv(result, cfg["timeline_csv"])
    print(f"✅ Timeline saved to {cfg['timeline_csv']}")

    if stepwise is None:
        print("⚠️  Closed-form engine only: skipping cycle CSV, HTML and VCD outputs.")
        return

    report.write_cycles_csv(stepwise.snapshots, cfg["cycles_csv"])
    print(f"✅ Cycle snapshots saved to {cfg['cycles_csv']}")

    if cfg["write_vcd"]:
        vcd_export.write_vcd(cfg["vcd_output"], stepwise.snapshots, cfg["clock_period_ns"])
        print(f"✅ VCD file '{cfg['vcd_output']}' generated successfully.")

    if cfg["write_html"]:
        print("🎨 Generating HTML...")
        with open(cfg["html_output"], "w", encoding="utf-8") as f:
            f.write(html_view.generate_html(stepwise, program))
        print(f"✅ Successfully generated '{cfg['html_output']}'.")
        if cfg["open_browser"]:
            webbrowser.open_new_tab(os.path.abspath(cfg["html_output"]))


def main(argv=None):
    # 1. Setup
    try:
        cfg = config.load_config(argv)
    except ConfigError as e:
        fail(str(e), EXIT_CONFIG)

    # 2. Read Program
    try:
        program = program_reader.read_program(cfg["program_path"])
    except OSError as e:
        fail(f"Error: cannot open {cfg['program_path']}: {e}", EXIT_CONFIG)
    except ParseError as e:
        fail(str(e), EXIT_PARSE)
    except EmptyProgramError as e:
        fail(str(e), EXIT_EMPTY)

    # 3. Time the Pipeline
    try:
        stepwise, result = run_engines(program, cfg["engine"])
    except EngineMismatchError as e:
        fail(str(e), EXIT_MISMATCH)

    problems = verify.timing_violations(result)
    if problems:
        print(f"⚠️  {len(problems)} timing invariant violation(s):")
        for p in problems[:5]:
            print(f"    - {p}")

    print()
    for line in report.summary_lines(result.summary, result.rows):
        print(line)

    if cfg["trace"]:
        if stepwise is None:
            print("⚠️  Cycle trace needs the stepwise engine; skipping.")
        else:
            print_trace(stepwise, program, cfg["trace_window"])

    # 4. Save Reports
    print()
    try:
        write_outputs(cfg, program, stepwise, result)
    except OSError as e:
        fail(f"Error: cannot write outputs: {e}", EXIT_OUTPUT)
    return 0


if __name__ == "__main__":
    main()
