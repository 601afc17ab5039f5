import html
import json

from .report import pipeline_diagram, summary_lines
from .timing import STAGES

COLOR_MAP = {"IF": "#ff9933", "ID": "#5cd65c", "EX": "#4b9aefd7", "MEM": "#cf66ffb9", "WB": "#ff2525c6", "STALL": "#e0e0e0"}


def generate_html(sim_results, program, title="No-Forwarding Pipeline Timeline"):
    # 1. Serialize Data for JS
    diagram = pipeline_diagram(sim_results.snapshots, program)
    cycles = [
        {"cycle": s.cycle, "contents": list(s.contents), "pending": s.pending_stalls, "stalled": s.stalled}
        for s in sim_results.snapshots
    ]
    js_data = {
        "title": html.escape(title),
        "diagram_js": json.dumps({"labels": list(diagram.index), "columns": list(diagram.columns),
                                  "cells": diagram.values.tolist()}),
        "cycles_js": json.dumps(cycles),
        "stages_js": json.dumps(list(STAGES)),
        "color_map_js": json.dumps(COLOR_MAP),
        "summary_html": "<br>".join(html.escape(line) for line in summary_lines(sim_results.summary, sim_results.rows)),
    }

    # 2. The HTML Template (doubled braces survive str.format)
    html_template = """
<!DOCTYPE html>
<html><head><title>{title}</title>
<style>
body {{ font-family: sans-serif; margin: 20px; background-color: #f9f9f9; }}
h2, h3 {{ text-align: center; color: #333; }}
.controls {{ text-align: center; margin: 20px 0; display: flex; justify-content: center; gap: 10px; }}
.controls button {{ padding: 8px 16px; font-size: 14px; cursor: pointer; border: 1px solid #ccc; background: #fff; border-radius: 4px; }}
#cycleCounter {{ font-size: 18px; font-weight: bold; margin: 0 15px; align-self: center; }}
.summary {{ max-width: 600px; margin: 0 auto; font-family: monospace; background: #fff; border: 1px solid #ccc; padding: 10px; }}
.stage-panel {{ display: grid; grid-template-columns: repeat(5, 180px); justify-content: center; margin: 20px 0; }}
.stage-box {{ border: 1px solid #ccc; padding: 8px; text-align: center; font-family: monospace; min-height: 40px; background: #fff; }}
.stage-box.bubble {{ background-color: #eee; border: 2px dashed #bbb; color: #777; font-style: italic; }}
table {{ border-collapse: collapse; margin: 0 auto; font-size: 12px; }}
th, td {{ border: 1px solid #ddd; padding: 4px 6px; text-align: center; white-space: nowrap; }}
th {{ background-color: #1e3a8a; color: #fff; position: sticky; top: 0; }}
td.label {{ text-align: left; font-family: monospace; font-weight: bold; }}
td.current {{ outline: 2px solid #ffc107; }}
.timeline-scroll-wrapper {{ overflow-x: auto; }}
</style>
</head>
<body>
<h2>{title}</h2>
<div class="summary">{summary_html}</div>

<div class="controls">
    <button id="prevBtn">Previous</button>
    <span id="cycleCounter">Cycle 1</span>
    <button id="nextBtn">Next</button>
    <button id="playPauseBtn">Play</button>
</div>

<div id="stagePanel" class="stage-panel"></div>
<h3>Pipeline Diagram</h3>
<div class="timeline-scroll-wrapper"><table id="diagram"></table></div>

<script>
const diagram = {diagram_js};
const cycles = {cycles_js};
const stages = {stages_js};
const colorMap = {color_map_js};
let current = 0;
let timer = null;

function renderStages() {{
    const panel = document.getElementById("stagePanel");
    const snap = cycles[current];
    panel.innerHTML = "";
    stages.forEach((stage, i) => {{
        const box = document.createElement("div");
        const text = snap.contents[i];
        box.className = "stage-box" + (text ? "" : " bubble");
        box.style.backgroundColor = text ? colorMap[stage] : "";
        box.innerHTML = "<strong>" + stage + "</strong><br>" + (text || "bubble");
        panel.appendChild(box);
    }});
    let status = "Cycle " + snap.cycle;
    if (snap.stalled || snap.pending > 0) status += " (stall, " + snap.pending + " pending)";
    document.getElementById("cycleCounter").textContent = status;
}}

function renderDiagram() {{
    const table = document.getElementById("diagram");
    let rows = "<tr><th>Instruction</th>" + diagram.columns.map(c => "<th>" + c + "</th>").join("") + "</tr>";
    diagram.labels.forEach((label, r) => {{
        rows += "<tr><td class='label'>" + label + "</td>";
        diagram.cells[r].forEach((cell, c) => {{
            const bg = colorMap[cell] || "#fff";
            const cls = c === current ? " class='current'" : "";
            rows += "<td" + cls + " style='background:" + bg + "'>" + cell + "</td>";
        }});
        rows += "</tr>";
    }});
    table.innerHTML = rows;
}}

function render() {{ renderStages(); renderDiagram(); }}

document.getElementById("prevBtn").onclick = () => {{ if (current > 0) {{ current--; render(); }} }};
document.getElementById("nextBtn").onclick = () => {{ if (current < cycles.length - 1) {{ current++; render(); }} }};
document.getElementById("playPauseBtn").onclick = (e) => {{
    if (timer) {{ clearInterval(timer); timer = null; e.target.textContent = "Play"; return; }}
    e.target.textContent = "Pause";
    timer = setInterval(() => {{
        if (current >= cycles.length - 1) {{ clearInterval(timer); timer = null; e.target.textContent = "Play"; return; }}
        current++; render();
    }}, 500);
}};
render();
</script>
</body></html>
"""
    return html_template.format(**js_data)
