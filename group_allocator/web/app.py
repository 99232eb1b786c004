"""Minimal Flask application exposing the allocator via a web form."""
from __future__ import annotations

import csv
from io import StringIO
from pathlib import Path

import yaml
from flask import Flask, current_app, render_template_string, request

from ..engine.outcome import InvalidConfiguration
from ..io.config_loader import load_config
from ..io.roster_loader import load_roster
from ..storage import GroupStore

app = Flask(__name__)

INPUT_DIR = Path(__file__).resolve().parents[2] / "inputs"
app.config.setdefault("INPUT_DIR", str(INPUT_DIR))

STORE = GroupStore()
FORM_ID = "web"


def _input_dir() -> Path:
    return Path(current_app.config["INPUT_DIR"])


def _ensure_inputs_populated(input_dir: Path) -> None:
    """Create inputs dir and populate with examples if empty."""
    example_dir = Path(__file__).resolve().parents[2] / "examples"
    input_dir.mkdir(parents=True, exist_ok=True)
    if not any(input_dir.iterdir()) and example_dir.exists():
        for name in example_dir.iterdir():
            if name.is_file():
                (input_dir / name.name).write_text(name.read_text(encoding="utf8"), encoding="utf8")


EDIT_TEMPLATE = """
<!doctype html>
<title>Edit Roster</title>
<style>
  table { border-collapse: collapse; }
  th, td { padding: 4px; }
  input { width: 100%; box-sizing: border-box; }
</style>
<form method=post onsubmit="prepareData()">
  <h1>Edit Roster</h1>
  <table id="roster_table" border="1">
    <thead>
      <tr>
        {% for head in roster_header %}<th>{{ head }}</th>{% endfor %}
      </tr>
    </thead>
    <tbody>
      {% for row in roster_rows %}
      <tr>
        {% for cell in row %}
        <td><input type="text" value="{{ cell }}"></td>
        {% endfor %}
      </tr>
      {% endfor %}
    </tbody>
  </table>
  <button type="button" onclick="addRow('roster_table')">Add Row</button>

  <h1>Edit Settings</h1>
  <textarea name="config_content" rows="12" cols="60">{{ config_text }}</textarea>

  <input type=hidden name="roster_content" id="roster_content">
  <p><input type=submit value="Generate Groups"></p>
</form>

<script>
function addRow(id) {
  const table = document.getElementById(id);
  const cols = table.tHead.rows[0].cells.length;
  const row = table.tBodies[0].insertRow();
  for (let i = 0; i < cols; i++) {
    const cell = row.insertCell();
    cell.innerHTML = '<input type="text">';
  }
}

function csvCell(value) {
  return /[",\\n]/.test(value) ? '"' + value.replace(/"/g, '""') + '"' : value;
}

function tableToCSV(id) {
  const table = document.getElementById(id);
  const rows = Array.from(table.rows);
  const lines = [];
  for (const r of rows) {
    const cells = Array.from(r.cells).map(c => {
      const input = c.querySelector('input');
      return input ? input.value : c.textContent;
    });
    if (r.rowIndex === 0 || cells.some(v => v.trim() !== '')) {
      lines.push(cells.map(csvCell).join(','));
    }
  }
  return lines.join('\\n');
}

function prepareData() {
  document.getElementById('roster_content').value = tableToCSV('roster_table');
}
</script>
"""

RESULT_TEMPLATE = """
<!doctype html>
<title>Groups</title>
<h1>Groups</h1>
<table border="1">
  <tr><th>Group</th><th>Student</th><th>Rationale</th></tr>
  {% for group in result.groups %}
    {% for student_id in group.student_ids %}
      <tr>
        <td>{{ group.name }}</td>
        <td>{{ student_id }}</td>
        <td>{{ result.rationales.get((group.name, student_id), '') }}</td>
      </tr>
    {% endfor %}
  {% endfor %}
</table>

<h1>Group Summaries</h1>
<table border="1">
  <tr><th>Group</th><th>Size</th><th>Skill Averages</th><th>Key Skills</th><th>Genders</th><th>Ethnicities</th><th>Years</th></tr>
  {% for name, summary in result.group_summaries.items() %}
    <tr>
      <td>{{ name }}</td>
      <td>{{ summary['size'] }}</td>
      <td>{% for skill, avg in summary['skill_averages'].items() %}{{ skill }}: {{ '%.2f'|format(avg) }}<br>{% endfor %}</td>
      <td>{{ ', '.join(summary['key_skills']) }}</td>
      <td>{% for value, count in summary['gender'].items() %}{{ value }} ({{ count }})<br>{% endfor %}</td>
      <td>{% for value, count in summary['ethnicity'].items() %}{{ value }} ({{ count }})<br>{% endfor %}</td>
      <td>{% for value, count in summary['academic_year'].items() %}{{ value }} ({{ count }})<br>{% endfor %}</td>
    </tr>
  {% endfor %}
</table>

<p><a href="/">Back</a></p>
"""

ERROR_TEMPLATE = """
<!doctype html>
<title>Allocation Error</title>
<h1>Could not generate groups</h1>
<p>{{ message }}</p>
<p><a href="/">Back</a></p>
"""

DEFAULT_ROSTER_HEADER = [
    "student_id",
    "name",
    "gender",
    "ethnicity",
    "academic_year",
    "status",
    "major",
    "skills",
]


@app.route("/", methods=["GET", "POST"])
def generate_groups():
    """Render edit form or process allocation request."""
    input_dir = _input_dir()
    _ensure_inputs_populated(input_dir)
    roster_path = input_dir / "roster.csv"
    config_path = input_dir / "config.yaml"

    if request.method == "POST" and "roster_content" in request.form:

        roster_content = request.form.get("roster_content", "")
        config_content = request.form.get("config_content", "")
        with open(roster_path, "w", encoding="utf8") as handle:
            handle.write(roster_content.strip() + "\n")
        with open(config_path, "w", encoding="utf8") as handle:
            handle.write(config_content.strip() + "\n")

        try:
            roster = load_roster(roster_path)
            config = load_config(config_path)
        except (ValueError, yaml.YAMLError) as exc:
            return render_template_string(ERROR_TEMPLATE, message=str(exc)), 400

        outcome = STORE.run(FORM_ID, roster, config)
        if not outcome.ok:
            status = 400 if isinstance(outcome, InvalidConfiguration) else 500
            return render_template_string(ERROR_TEMPLATE, message=outcome.message), status

        return render_template_string(RESULT_TEMPLATE, result=outcome)

    roster_text = roster_path.read_text(encoding="utf8") if roster_path.exists() else ""
    config_text = config_path.read_text(encoding="utf8") if config_path.exists() else ""

    if roster_text:
        roster_data = list(csv.reader(StringIO(roster_text)))
        roster_header = roster_data[0] if roster_data else []
        roster_rows = roster_data[1:] if len(roster_data) > 1 else []
    else:
        roster_header = list(DEFAULT_ROSTER_HEADER)
        roster_rows = [[]]
    if not roster_rows or not roster_rows[0]:
        roster_rows = [["" for _ in roster_header]]

    return render_template_string(
        EDIT_TEMPLATE,
        roster_header=roster_header,
        roster_rows=roster_rows,
        config_text=config_text,
    )


def create_app() -> Flask:
    """Return the Flask application instance."""
    return app


if __name__ == "__main__":
    app.run(debug=True)
