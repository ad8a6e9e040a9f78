"""Self-contained HTML dashboard for a work log."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

from git_worklog.aggregate import daily_totals, summarize, weekly_totals
from git_worklog.models import Bucket, Session

CHART_JS_URL = "https://cdn.jsdelivr.net/npm/chart.js"


def html_escape(s: str) -> str:
    return (
        s.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def _chart_data(buckets: list[Bucket]) -> str:
    """Labels and hours for Chart.js, safe to inline in a <script> block."""
    data = {
        "labels": [b.key for b in buckets],
        "hours": [round(b.total_hours, 2) for b in buckets],
    }
    return json.dumps(data).replace("</", "<\\/")


def render_session_list(sessions: list[Session]) -> str:
    if not sessions:
        return '<div class="empty">No sessions</div>'

    rows = []
    for session in sessions:
        rows.append(
            f'<div class="session">\n'
            f'          <div class="session-date">{session.start:%Y-%m-%d %H:%M} - '
            f"{session.duration_minutes / 60:.2f}h</div>\n"
            f'          <div class="session-details">\n'
            f"            {html_escape(session.description)}<br>\n"
            f"            <small>{html_escape(session.author)} | "
            f"{session.commit_count} commits</small>\n"
            f"          </div>\n"
            f"        </div>"
        )
    return "\n".join(rows)


def build_dashboard(repository: str | Path, sessions: list[Session]) -> str:
    """Build the dashboard page: key metrics, session list, daily and weekly charts."""
    summary = summarize(sessions)
    daily = daily_totals(sessions)
    weekly = weekly_totals(sessions)
    repo_name = html_escape(Path(repository).resolve().name)
    generated = datetime.now().strftime("%Y-%m-%d %H:%M")

    html = f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Work Log Dashboard - {repo_name}</title>
  <script src="{CHART_JS_URL}"></script>
  <style>
    body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Arial, sans-serif; margin: 20px; background: #f5f5f5; }}
    .container {{ max-width: 1200px; margin: 0 auto; }}
    .header {{ background: white; padding: 20px; border-radius: 8px; margin-bottom: 20px; box-shadow: 0 2px 4px rgba(0,0,0,0.1); }}
    .grid {{ display: grid; grid-template-columns: 1fr 1fr; gap: 20px; margin-bottom: 20px; }}
    .card {{ background: white; padding: 20px; border-radius: 8px; box-shadow: 0 2px 4px rgba(0,0,0,0.1); }}
    .metric {{ text-align: center; margin-bottom: 15px; }}
    .metric h4 {{ margin: 0; color: #333; }}
    .metric .value {{ font-size: 2em; font-weight: bold; color: #007acc; }}
    .chart-container {{ position: relative; height: 300px; width: 100%; }}
    .sessions-list {{ max-height: 400px; overflow-y: auto; }}
    .session {{ padding: 10px; border-bottom: 1px solid #eee; }}
    .session:last-child {{ border-bottom: none; }}
    .session-date {{ font-weight: bold; color: #333; }}
    .session-details {{ font-size: 0.9em; color: #666; }}
    .empty {{ text-align: center; color: #666; margin: 50px 0; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="header">
      <h1>Work Log Dashboard</h1>
      <h2>{repo_name}</h2>
      <p><strong>Total Time:</strong> {summary.total_hours:.2f}h | <strong>Sessions:</strong> {summary.session_count} | <strong>Commits:</strong> {summary.commit_count}</p>
      <p><strong>Generated:</strong> {generated}</p>
    </div>

    <div class="grid">
      <div class="card">
        <h3>Key Metrics</h3>
        <div class="metric">
          <h4>Total Hours</h4>
          <div class="value">{summary.total_hours:.2f}h</div>
        </div>
        <div class="metric">
          <h4>Average Session</h4>
          <div class="value">{summary.average_session_hours:.1f}h</div>
        </div>
        <div class="metric">
          <h4>Commits per Hour</h4>
          <div class="value">{summary.commits_per_hour:.1f}</div>
        </div>
      </div>

      <div class="card">
        <h3>Daily Hours</h3>
        <div class="chart-container">
          <canvas id="dailyChart"></canvas>
        </div>
      </div>
    </div>

    <div class="grid">
      <div class="card">
        <h3>Sessions</h3>
        <div class="sessions-list">
        {render_session_list(sessions)}
        </div>
      </div>

      <div class="card">
        <h3>Weekly Trend</h3>
        <div class="chart-container" id="weeklyContainer">
          <canvas id="weeklyChart"></canvas>
        </div>
      </div>
    </div>
  </div>

  <script>
    const dailyData = {_chart_data(daily)};
    const weeklyData = {_chart_data(weekly)};
    const hoursAxis = {{ y: {{ beginAtZero: true, title: {{ display: true, text: 'Hours' }} }} }};

    new Chart(document.getElementById('dailyChart').getContext('2d'), {{
      type: 'bar',
      data: {{
        labels: dailyData.labels,
        datasets: [{{ label: 'Hours', data: dailyData.hours, backgroundColor: '#007acc', borderColor: '#005999', borderWidth: 1 }}]
      }},
      options: {{ responsive: true, maintainAspectRatio: false, scales: hoursAxis }}
    }});

    if (weeklyData.labels.length > 1) {{
      new Chart(document.getElementById('weeklyChart').getContext('2d'), {{
        type: 'line',
        data: {{
          labels: weeklyData.labels,
          datasets: [{{ label: 'Weekly Hours', data: weeklyData.hours, borderColor: '#28a745', backgroundColor: 'rgba(40, 167, 69, 0.1)', fill: true, tension: 0.4 }}]
        }},
        options: {{ responsive: true, maintainAspectRatio: false, scales: hoursAxis }}
      }});
    }} else {{
      document.getElementById('weeklyContainer').innerHTML =
        '<p class="empty">Not enough data for weekly trend</p>';
    }}
  </script>
</body>
</html>"""
    return html


def write_dashboard(path: str | Path, repository: str | Path, sessions: list[Session]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(build_dashboard(repository, sessions), encoding="utf-8")
    return path
