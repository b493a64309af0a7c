"""HTML rendering for the todo page."""

from html import escape

_ACTION_SCRIPT = """
<script>
async function todoAction(method, url, body) {
  const options = {method: method, headers: {"Content-Type": "application/json"}};
  if (body !== undefined) options.body = JSON.stringify(body);
  const response = await fetch(url, options);
  if (!response.ok) console.error("Todo action failed:", response.status);
  window.location.reload();
}

document.addEventListener("submit", (event) => {
  const form = event.target;
  event.preventDefault();
  const body = {
    title: form.elements.title.value,
    description: form.elements.description.value,
  };
  todoAction("POST", form.dataset.url, body);
});

document.addEventListener("click", (event) => {
  const el = event.target.closest("[data-action]");
  if (!el) return;
  if (el.dataset.confirm && !window.confirm(el.dataset.confirm)) {
    event.preventDefault();
    return;
  }
  todoAction(el.dataset.method || "POST", el.dataset.url);
});
</script>
"""

_STYLE = """
<style>
body { font-family: system-ui, sans-serif; background: #f9fafb; color: #1f2937; }
main { max-width: 42rem; margin: 0 auto; padding: 1.5rem; }
.todo { background: #fff; border-radius: .5rem; padding: 1rem; margin-bottom: .5rem; display: flex; gap: .75rem; }
.todo.completed { opacity: .75; }
.todo.completed .title, .todo.completed .description { text-decoration: line-through; }
.meta { font-size: .75rem; color: #9ca3af; }
.error { color: #b91c1c; }
.empty { text-align: center; color: #6b7280; padding: 3rem 0; }
</style>
"""


def _date(value) -> str:
    return value.date().isoformat()


def _description(todo: dict) -> str:
    if not todo["description"]:
        return ""
    return f'<p class="description">{escape(todo["description"])}</p>'


def _toggle(todo: dict) -> str:
    checked = " checked" if todo["completed"] else ""
    return (
        f'<input type="checkbox" class="toggle"{checked} data-action="toggle" '
        f'data-url="/api/todos/{todo["id"]}/toggle" aria-label="Toggle">'
    )


def _delete_button(todo: dict) -> str:
    prompt = f'Are you sure you want to delete "{todo["title"]}"? This action cannot be undone.'
    return (
        f'<button type="button" class="delete" data-action="delete" data-method="DELETE" '
        f'data-url="/api/todos/{todo["id"]}" data-confirm="{escape(prompt)}">Delete</button>'
    )


def render_editing_row(todo: dict, draft: dict) -> str:
    """Render the edit form for the row being edited."""
    return (
        f'<li class="todo editing" data-id="{todo["id"]}">'
        f'<form class="edit-form" data-url="/api/todos/{todo["id"]}/save">'
        f'<input name="title" value="{escape(draft["title"])}" required>'
        f'<textarea name="description" rows="2" placeholder="Description (optional)">'
        f'{escape(draft["description"])}</textarea>'
        f'<button type="submit" class="save">Save</button>'
        f'<button type="button" class="cancel" data-action="cancel" '
        f'data-url="/api/todos/cancel">Cancel</button>'
        f"</form></li>"
    )


def render_row(todo: dict) -> str:
    """Render one todo in its viewing state."""
    title = escape(todo["title"])
    if todo["completed"]:
        meta = f'Completed {_date(todo["updated_at"])}'
        actions = _delete_button(todo)
    else:
        meta = f'Created {_date(todo["created_at"])}'
        actions = (
            f'<button type="button" class="edit" data-action="edit" '
            f'data-url="/api/todos/{todo["id"]}/edit">Edit</button>'
            f"{_delete_button(todo)}"
        )
    css = "todo completed" if todo["completed"] else "todo"
    return (
        f'<li class="{css}" data-id="{todo["id"]}">'
        f"{_toggle(todo)}"
        f'<div class="body"><h3 class="title">{title}</h3>'
        f'{_description(todo)}<p class="meta">{meta}</p></div>'
        f'<div class="actions">{actions}</div>'
        f"</li>"
    )


def _section(css: str, heading: str, rows: list[str]) -> str:
    if not rows:
        return ""
    return (
        f'<section class="{css}"><h2>{heading} ({len(rows)})</h2>'
        f'<ul>{"".join(rows)}</ul></section>'
    )


def render_page(snapshot: dict) -> str:
    """Render the whole page from a :meth:`TodoViewState.snapshot`.

    Incomplete and completed todos are listed in separate sections; a section
    with no rows is left out. Only incomplete rows can be edited.
    """
    todos = snapshot["todos"]
    editing_id = snapshot["editing_id"]

    incomplete = []
    completed = []
    for todo in todos:
        if todo["completed"]:
            completed.append(render_row(todo))
        elif todo["id"] == editing_id:
            incomplete.append(render_editing_row(todo, snapshot["draft"]))
        else:
            incomplete.append(render_row(todo))

    error = ""
    if snapshot["error"]:
        error = f'<p class="error" role="alert">{escape(snapshot["error"])}</p>'

    empty = ""
    if not todos:
        empty = (
            '<div class="empty"><h3>No tasks yet</h3>'
            "<p>Add your first task above to get started</p></div>"
        )

    return (
        "<!DOCTYPE html>"
        '<html lang="en"><head><meta charset="utf-8">'
        "<title>Todo List</title>"
        f"{_STYLE}</head><body><main>"
        "<header><h1>Todo List</h1><p>Keep track of your tasks</p></header>"
        f"{error}"
        '<form class="create-form" data-url="/api/todos">'
        '<input name="title" placeholder="Add a new task..." required>'
        '<textarea name="description" rows="2" placeholder="Description (optional)"></textarea>'
        '<button type="submit">Add</button>'
        "</form>"
        f'{_section("incomplete", "Tasks", incomplete)}'
        f'{_section("completed", "Completed", completed)}'
        f"{empty}"
        f"</main>{_ACTION_SCRIPT}</body></html>"
    )
