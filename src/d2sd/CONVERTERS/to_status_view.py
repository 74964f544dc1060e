"""
Converters for the HTML status page listing every discovered container.
"""
from typing import Dict, Iterable, List
from jinja2 import Environment
from pydantic import BaseModel

from ..MODELS.resolved_target import ResolvedTarget

STATUS_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>Docker service discovery</title>
  <style>
    body { font-family: sans-serif; margin: 2em; }
    table { border-collapse: collapse; }
    td, th { border: 1px solid #ccc; padding: 4px 8px; vertical-align: top; text-align: left; }
    tr.error { background: #fdd; }
    tr.warning { background: #ffd; }
    tr.ok { background: #dfd; }
    ul { margin: 0; padding-left: 1em; font-family: monospace; }
  </style>
</head>
<body>
  <h1>Containers</h1>
  <p>
    Total: {{ view.total }},
    with job: {{ view.with_job }},
    OK: {{ view.oks }},
    warnings: {{ view.warnings }},
    errors: {{ view.errors }}
  </p>
  <table>
    <tr>
      <th>Name</th><th>Address</th><th>Job</th><th>Target network</th>
      <th>TCP ports</th><th>Explicit port</th><th>Labels</th>
    </tr>
    {% for item in view.items %}
    <tr class="{{ item.status }}">
      <td>{{ item.name }}</td>
      <td>{{ item.address }}</td>
      <td>{{ 'yes' if item.has_job else 'no' }}</td>
      <td>{{ 'yes' if item.is_in_target_network else 'no' }}</td>
      <td>{{ 'yes' if item.has_tcp_ports else 'no' }}</td>
      <td>{{ 'yes' if item.has_explicit_port else 'no' }}</td>
      <td><ul>{% for label in item.labels %}<li>{{ label }}</li>{% endfor %}</ul></td>
    </tr>
    {% endfor %}
  </table>
</body>
</html>
"""


class StatusItem(BaseModel):
    """
    One row of the status page.
    """
    name: str
    address: str
    labels: List[str]
    status: str  # '', 'ok', 'warning' or 'error'
    has_job: bool
    is_exported: bool
    is_in_target_network: bool
    has_tcp_ports: bool
    has_explicit_port: bool


class StatusView(BaseModel):
    """
    Summary and rows of the status page.
    """
    total: int = 0
    with_job: int = 0
    oks: int = 0
    errors: int = 0
    warnings: int = 0
    items: List[StatusItem] = []


def format_labels(labels: Dict[str, str]) -> List[str]:
    """
    Renders labels as sorted 'key="value"' strings.
    """
    return sorted(f'{k}="{v}"' for k, v in labels.items())


class StatusViewConverter:
    """
    Builds and renders the status page from resolved targets.
    """
    def __init__(self):
        """
        Initializes the converter and compiles the page template.
        """
        self.template = Environment(autoescape=True).from_string(STATUS_TEMPLATE)

    def convert(self, targets: Iterable[ResolvedTarget]) -> StatusView:
        """
        Summarizes targets. A container with a job is OK when exported with an
        explicit port, a warning when exported without one and an error otherwise.

        :param targets: Resolved records in display order.
        :return: The status view.
        """
        view = StatusView()

        for t in targets:
            view.total += 1
            status = ""
            if t.has_job:
                view.with_job += 1
                if t.is_exported:
                    if t.has_explicit_port:
                        view.oks += 1
                        status = "ok"
                    else:
                        view.warnings += 1
                        status = "warning"
                else:
                    view.errors += 1
                    status = "error"

            view.items.append(StatusItem(
                name=t.name,
                address=t.address,
                labels=format_labels(t.labels),
                status=status,
                has_job=t.has_job,
                is_exported=t.is_exported,
                is_in_target_network=t.is_in_target_network,
                has_tcp_ports=t.has_tcp_ports,
                has_explicit_port=t.has_explicit_port,
            ))

        return view

    def render(self, view: StatusView) -> str:
        """
        Renders the view as an HTML page.

        :param view: The status view.
        :return: The HTML document.
        """
        return self.template.render(view=view)
