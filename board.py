"""HTML task board generation — mobile-friendly, one column per status."""

from datetime import datetime
from pathlib import Path
from typing import Optional

from jinja2 import Template

from packages.tasks.models import Task, TaskFilter
from packages.tasks.state import TaskBoard

BOARD_TEMPLATE = Template("""\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Task Board</title>
<style>
  * { margin: 0; padding: 0; box-sizing: border-box; }
  body {
    font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif;
    background: #f0f2f5;
    color: #1a1a1a;
    padding: 16px;
  }
  header {
    display: flex; justify-content: space-between; align-items: center;
    margin-bottom: 16px; flex-wrap: wrap; gap: 8px;
  }
  header h1 { font-size: 20px; font-weight: 600; }
  header .meta { color: #888; font-size: 12px; }

  .board {
    display: flex;
    gap: 14px;
    overflow-x: auto;
    align-items: flex-start;
    padding-bottom: 16px;
  }
  .column {
    background: #fff;
    border-radius: 10px;
    min-width: 280px;
    max-width: 360px;
    flex-shrink: 0;
    box-shadow: 0 1px 3px rgba(0,0,0,0.08);
  }
  @media (max-width: 700px) {
    body { padding: 10px; }
    .board { flex-direction: column; overflow-x: visible; }
    .column { min-width: unset; max-width: unset; width: 100%; }
  }

  .column-header {
    padding: 12px 14px 10px;
    font-weight: 600;
    font-size: 14px;
    border-bottom: 1px solid #f0f0f0;
    display: flex;
    justify-content: space-between;
    align-items: center;
  }
  .column-header .count {
    background: #e8e8e8;
    color: #666;
    font-size: 11px;
    padding: 2px 8px;
    border-radius: 10px;
  }
  .column-body { padding: 6px; }
  .empty { color: #aaa; font-size: 12px; padding: 10px 12px; }

  .card {
    padding: 10px 12px;
    margin: 5px 0;
    border-radius: 8px;
    border-left: 3px solid #3498db;
    background: #fafafa;
    font-size: 14px;
    line-height: 1.4;
  }
  .card.completed { border-left-color: #4caf50; color: #999; }
  .card.completed .title { text-decoration: line-through; }
  .card .title { font-weight: 500; }
  .card .description { font-size: 12px; color: #666; margin-top: 2px; }
  .card .meta-row {
    display: flex; gap: 6px; margin-top: 4px; flex-wrap: wrap;
    font-size: 11px; color: #888;
  }
  .card .meta-row .tag {
    background: #f0f0f0;
    padding: 1px 6px;
    border-radius: 3px;
    white-space: nowrap;
  }

  .stats {
    display: flex; gap: 16px; margin-bottom: 14px;
    font-size: 12px; color: #888; flex-wrap: wrap;
  }
  .error { background: #fadbd8; color: #c0392b; padding: 8px 12px; border-radius: 6px; margin-bottom: 12px; }
</style>
</head>
<body>
<header>
  <h1>Task Board{% if user_label %} · {{ user_label }}{% endif %}</h1>
  <span class="meta">{{ generated_at }} · filter: {{ current_filter }}</span>
</header>
{% if error_message %}<div class="error">{{ error_message }}</div>{% endif %}
<div class="stats">
  <span class="stat">{{ counts.pending }} pending</span>
  <span class="stat">{{ counts.completed }} completed</span>
  <span class="stat">{{ counts.total }} total</span>
</div>
<div class="board">
{% for col in columns %}
  <div class="column">
    <div class="column-header">
      {{ col.name }}
      <span class="count">{{ col.tasks | length }}</span>
    </div>
    <div class="column-body">
    {% for t in col.tasks %}
      <div class="card{% if t.is_completed %} completed{% endif %}">
        <div class="title">{{ t.title }}</div>
        {% if t.description %}<div class="description">{{ t.description }}</div>{% endif %}
        <div class="meta-row">
          <span class="tag">{{ t.created_at.strftime("%Y-%m-%d %H:%M") }}</span>
          <span class="tag">{{ t.short_id }}</span>
        </div>
      </div>
    {% else %}
      <div class="empty">Nothing here.</div>
    {% endfor %}
    </div>
  </div>
{% endfor %}
</div>
</body>
</html>
""", autoescape=True)


def build_columns(tasks: list[Task], current_filter: TaskFilter) -> list[dict]:
    """Split tasks into status columns; a status filter keeps only its own column."""
    columns = []
    if current_filter in (TaskFilter.ALL, TaskFilter.PENDING):
        columns.append({"name": "Pending", "tasks": [t for t in tasks if not t.is_completed]})
    if current_filter in (TaskFilter.ALL, TaskFilter.COMPLETED):
        columns.append({"name": "Completed", "tasks": [t for t in tasks if t.is_completed]})
    return columns


def render_board(board: TaskBoard, user_label: str = "", now: Optional[datetime] = None) -> str:
    tasks = board.tasks
    completed = sum(1 for t in tasks if t.is_completed)
    counts = {"total": len(tasks), "completed": completed, "pending": len(tasks) - completed}
    return BOARD_TEMPLATE.render(
        columns=build_columns(board.filtered_tasks, board.current_filter),
        counts=counts,
        current_filter=board.current_filter.value,
        error_message=board.error_message,
        user_label=user_label,
        generated_at=(now or datetime.now()).strftime("%Y-%m-%d %H:%M"),
    )


def generate_board(board: TaskBoard, output: Path, user_label: str = "") -> Path:
    """Write board.html for the board's current state. Returns the output path."""
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(render_board(board, user_label=user_label))
    return output
