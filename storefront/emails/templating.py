from jinja2 import Environment, FileSystemLoader, select_autoescape

from storefront.config import TEMPLATES_DIR

env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)

def money(value) -> str:
    return f"${float(value or 0):,.2f}"

env.filters["money"] = money

def render_template(template_path: str, **context) -> str:
    template = env.get_template(template_path)
    return template.render(**context)
