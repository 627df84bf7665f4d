from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Dict, List

from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from .calc_trace import CalcTrace, dump_trace_json
from .report_renderer import render_report_html

def _autosize(ws):
    for col in ws.columns:
        max_len = 0
        col_letter = get_column_letter(col[0].column)
        for cell in col:
            val = "" if cell.value is None else str(cell.value)
            max_len = max(max_len, len(val))
        ws.column_dimensions[col_letter].width = min(80, max(10, max_len + 2))

def _placements(trace: CalcTrace) -> List[Dict[str, Any]]:
    return list(trace.tables.get("placements", []))

def export_html(trace: CalcTrace, out_dir: Path) -> Path:
    html = render_report_html(trace.to_dict())
    p = out_dir / "report.html"
    p.write_text(html, encoding="utf-8")
    return p

def export_pdf(trace: CalcTrace, out_dir: Path) -> Path:
    """
    One-page PDF: nail marks + hash/version. Full derivations are in report.html.
    """
    p = out_dir / "report.pdf"
    u = "cm" if trace.meta.units_system == "cm" else "in"
    c = canvas.Canvas(str(p), pagesize=letter)
    w, h = letter
    y = h - 72
    c.setFont("Helvetica-Bold", 14)
    c.drawString(72, y, "Nail Placement - Summary")
    y -= 24
    c.setFont("Helvetica", 10)
    c.drawString(72, y, f"Tool: {trace.meta.tool_id} v{trace.meta.tool_version}")
    y -= 14
    c.drawString(72, y, f"Input hash: {trace.meta.input_hash}")
    y -= 14
    c.drawString(72, y, f"Generated: {trace.meta.timestamp}")
    y -= 22
    c.setFont("Helvetica", 9)
    c.drawString(72, y, "Note: step-by-step derivations are provided in report.html (offline).")
    y -= 18
    c.setFont("Helvetica-Bold", 10)
    c.drawString(72, y, "Nail marks (heights from floor, distances from wall left edge unless noted):")
    y -= 14
    c.setFont("Helvetica", 9)
    for r in _placements(trace):
        label = r.get("position") or f"Artwork {r['artwork']}"
        if r["horizontal_distance_2"] is not None:
            horiz = f"left {r['horizontal_distance']:.2f}{u}, right {r['horizontal_distance_2']:.2f}{u}"
        elif r["horizontal_reference"] == "center":
            horiz = f"{r['horizontal_distance']:.2f}{u} (wall center)"
        else:
            horiz = f"{r['horizontal_distance']:.2f}{u}"
        if y < 72:
            c.showPage()
            y = h - 72
            c.setFont("Helvetica", 9)
        c.drawString(84, y, f"{label}: nail at {r['nail_height']:.2f}{u}; {horiz}")
        y -= 12
    c.showPage()
    c.save()
    return p

def export_excel(trace: CalcTrace, out_dir: Path) -> Path:
    wb = Workbook()

    # Placements sheet
    ws = wb.active
    ws.title = "Placements"
    cols = ["artwork", "position", "mounting_type", "centroid", "nail_height", "horizontal_distance",
            "horizontal_distance_2", "horizontal_reference", "equation", "horizontal_equation"]
    ws.append(cols)
    for r in _placements(trace):
        ws.append([r.get(k) for k in cols])
    _autosize(ws)

    # Inputs
    ws1 = wb.create_sheet("Inputs")
    ws1.append(["id", "label", "value", "units", "source", "notes"])
    for i in trace.inputs:
        ws1.append([i.id, i.label, i.value, i.units, i.source, i.notes])
    _autosize(ws1)

    # Assumptions
    ws2 = wb.create_sheet("Assumptions")
    ws2.append(["id", "text"])
    for a in trace.assumptions:
        ws2.append([a.id, a.text])
    _autosize(ws2)

    # Calcs
    ws3 = wb.create_sheet("Calcs")
    ws3.append(["id", "section", "title", "reference", "equation", "substitution", "result_rounded", "units", "variables_json"])
    for s in trace.steps:
        ref = "; ".join([f"{r.type}:{r.ref}" for r in s.references])
        vars_json = json.dumps([{
            "symbol": v.symbol, "description": v.description, "value": v.value, "units": v.units, "source": v.source
        } for v in s.variables], ensure_ascii=True)
        ws3.append([s.id, s.section, s.title, ref, s.equation_latex, s.substitution_latex, s.result_rounded.value, s.result_rounded.units, vars_json])
    _autosize(ws3)

    # Summary
    ws4 = wb.create_sheet("Summary")
    ws4.append(["key", "value"])
    for k, v in trace.summary.items():
        ws4.append([k, json.dumps(v, ensure_ascii=False) if isinstance(v, (dict, list)) else v])
    _autosize(ws4)

    p = out_dir / "results.xlsx"
    wb.save(p)
    return p

def export_json(trace: CalcTrace, out_dir: Path, results: Dict[str, Any]) -> Dict[str, Path]:
    p1 = out_dir / "calc_trace.json"
    dump_trace_json(trace, str(p1))

    p2 = out_dir / "results.json"
    p2.write_text(json.dumps(results, indent=2, ensure_ascii=True), encoding="utf-8")
    return {"calc_trace": p1, "results": p2}

def export_nail_marks_csv(trace: CalcTrace, out_dir: Path) -> Path:
    """One row per nail, ready to take to the wall."""
    p = out_dir / "nail_marks.csv"
    with p.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["artwork", "position", "nail", "height", "horizontal", "reference", "units"])
        for r in _placements(trace):
            pos = r.get("position") or ""
            if r["horizontal_distance_2"] is not None:
                w.writerow([r["artwork"], pos, "left", r["nail_height"], r["horizontal_distance"], "left", trace.meta.units_system])
                w.writerow([r["artwork"], pos, "right", r["nail_height"], r["horizontal_distance_2"], "left", trace.meta.units_system])
            else:
                w.writerow([r["artwork"], pos, "wire", r["nail_height"], r["horizontal_distance"], r["horizontal_reference"], trace.meta.units_system])
    return p

def export_all(trace: CalcTrace, out_dir: Path, results: Dict[str, Any]) -> Dict[str, Path]:
    outputs: Dict[str, Path] = {}
    outputs["html"] = export_html(trace, out_dir)
    outputs["pdf"] = export_pdf(trace, out_dir)
    outputs.update(export_json(trace, out_dir, results))
    outputs["excel"] = export_excel(trace, out_dir)
    outputs["nail_marks"] = export_nail_marks_csv(trace, out_dir)
    return outputs
