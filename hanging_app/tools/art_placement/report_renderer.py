from __future__ import annotations
import html, json
from typing import Any, Dict

def _e(x: Any) -> str:
    return html.escape(str(x))

def render_report_html(trace: Dict[str, Any]) -> str:
    meta = trace["meta"]
    u = "cm" if meta["units_system"] == "cm" else "in"
    css = """    body{font-family:Segoe UI,Arial,sans-serif;margin:24px;color:#111}
    h1{margin:0 0 6px 0}
    .sub{font-size:12px;color:#444}
    .card{border:1px solid #bbb;border-radius:8px;padding:12px;margin:12px 0}
    .title{font-size:16px;font-weight:700;margin:0 0 8px 0}
    table{border-collapse:collapse;width:100%;font-size:12px}
    th,td{border:1px solid #ccc;padding:6px;vertical-align:top}
    th{background:#f3f3f3;text-align:left}
    .eq{font-family:Consolas,monospace;background:#fafafa;border:1px solid #ddd;padding:8px;border-radius:6px;white-space:pre-wrap}
    .mono{font-family:Consolas,monospace}
    """

    def inputs_tbl():
        rows=[]
        for i in trace["inputs"]:
            rows.append(f"<tr><td class='mono'>{_e(i['id'])}</td><td>{_e(i['label'])}</td><td>{_e(i['value'])}</td><td>{_e(i['units'])}</td><td>{_e(i['source'])}</td></tr>")
        return "<table><tr><th>ID</th><th>Label</th><th>Value</th><th>Units</th><th>Source</th></tr>"+"".join(rows)+"</table>"

    def assump():
        a=trace.get("assumptions",[])
        if not a:
            return "<div class='sub'>None.</div>"
        return "<ul>"+"".join([f"<li>{_e(x['id'])}: {_e(x['text'])}</li>" for x in a])+"</ul>"

    def placements():
        res=trace.get("tables",{}).get("placements",[])
        if not res:
            return "<div class='sub'>No artworks to place.</div>"
        rows=[]
        for r in res:
            if r["horizontal_distance_2"] is not None:
                horiz=f"L {r['horizontal_distance']:.2f} / R {r['horizontal_distance_2']:.2f} {u} from left edge"
            else:
                horiz=f"{r['horizontal_distance']:.2f} {u} from {r['horizontal_reference']}"
            label=r.get("position") or f"Artwork {r['artwork']}"
            rows.append(
                f"<tr><td>{_e(label)}</td><td>{_e(r['mounting_type'])}</td><td>{r['centroid']:.2f}</td>"
                f"<td><b>{r['nail_height']:.2f}</b></td><td>{_e(horiz)}</td></tr>"
                f"<tr><td colspan='5'><div class='eq'>{_e(r['equation'])}\n{_e(r['horizontal_equation'])}</div></td></tr>"
            )
        return (f"<table><tr><th>Artwork</th><th>Mount</th><th>Centroid [{u}]</th><th>Nail height [{u}]</th>"
                f"<th>Horizontal</th></tr>"+"".join(rows)+"</table>")

    def step(s):
        vars_rows="".join([f"<tr><td class='mono'>{_e(v['symbol'])}</td><td>{_e(v['description'])}</td><td>{_e(v['value'])}</td><td>{_e(v['units'])}</td><td>{_e(v['source'])}</td></tr>" for v in s['variables']])
        rounded_val = s['result_rounded']['value']
        try:
            rounded_val = f"{float(rounded_val):.2f}"
        except (ValueError, TypeError):
            pass
        return f"""        <div class='card'>
          <div class='title'>{_e(s['id'])} — {_e(s['section'])}: {_e(s['title'])}</div>
          <div class='sub' style='margin-top:8px'><b>1) Equation</b></div>
          <div class='eq'>{_e(s['equation_latex'])}</div>
          <div class='sub' style='margin-top:8px'><b>2) Substitution</b></div>
          <div class='eq'>{_e(s['substitution_latex'])}</div>
          <div class='sub' style='margin-top:8px'><b>3) Variables</b></div>
          <table><tr><th>Symbol</th><th>Description</th><th>Value</th><th>Units</th><th>Source</th></tr>{vars_rows}</table>
          <div class='sub' style='margin-top:8px'><b>4) Result</b></div>
          <div class='eq'><b>{_e(s['output_symbol'])} = {_e(rounded_val)} {_e(s['result_rounded']['units'])}</b></div>
        </div>
        """

    steps_html="".join([step(s) for s in trace['steps']]) or "<div class='sub'>None.</div>"
    summary_html=f"<pre class='eq'>{_e(json.dumps(trace.get('summary',{}), indent=2))}</pre>"

    return f"""<!doctype html>
<html><head><meta charset='utf-8'/><meta name='viewport' content='width=device-width, initial-scale=1'/>
<title>Nail Placement — {_e(meta['tool_id'])}</title><style>{css}</style></head>
<body>
<h1>Nail Placement</h1>
<div class='sub'>{_e(meta['tool_id'])} v{_e(meta['tool_version'])} — Report v{_e(meta['report_version'])}</div>
<div class='sub'>Timestamp: {_e(meta['timestamp'])} — Input hash: <span class='mono'>{_e(meta['input_hash'])}</span></div>
<div class='sub'>Units: {_e(meta['units_system'])}</div>

<div class='card'><div class='title'>Nail Placement Results</div>{placements()}</div>
<div class='card'><div class='title'>Summary</div>{summary_html}</div>
<div class='card'><div class='title'>Inputs</div>{inputs_tbl()}</div>
<div class='card'><div class='title'>Assumptions</div>{assump()}</div>
<div class='card'><div class='title'>Calculation Steps</div>{steps_html}</div>
</body></html>"""
