"""Service unit template rendering."""
import re
from pathlib import Path
from typing import Dict, Mapping, Optional

from botdeploy.core.errors import TemplateNotFound, TemplateSubstitutionIncomplete
from botdeploy.core.logger import get_logger

logger = get_logger(__name__)

DEFAULT_PLACEHOLDERS: Dict[str, str] = {
    'unit_name': '{{BOT_NAME}}',
    'user': '{{USER}}',
}

PLACEHOLDER_PATTERN = re.compile(r'\{\{\s*[^{}\s]*\s*\}\}')


class TemplateRenderer:
    """Renders service unit files from a template.

    Args:
        placeholders: Maps value keys (e.g. 'unit_name') to the literal token
            replaced in the template (e.g. '{{BOT_NAME}}')
    """

    def __init__(self, placeholders: Optional[Mapping[str, str]] = None):
        self.placeholders = dict(placeholders or DEFAULT_PLACEHOLDERS)

    def render(self, template_path: Path, values: Mapping[str, str]) -> str:
        """Substitute values into the template.

        Args:
            template_path: Template file
            values: Value per placeholder key; every key in self.placeholders
                must be present

        Returns:
            Rendered document

        Raises:
            TemplateNotFound: If the template file does not exist
            TemplateSubstitutionIncomplete: If any {{...}} token is left
        """
        template_path = Path(template_path)
        if not template_path.is_file():
            raise TemplateNotFound(template_path)

        missing = [key for key in self.placeholders if key not in values]
        if missing:
            raise KeyError(f"No value for placeholder(s): {', '.join(missing)}")

        rendered = template_path.read_text()
        for key, token in self.placeholders.items():
            rendered = rendered.replace(token, str(values[key]))

        leftovers = sorted(set(PLACEHOLDER_PATTERN.findall(rendered)))
        if leftovers:
            raise TemplateSubstitutionIncomplete(template_path, leftovers)

        return rendered

    def render_to_file(
        self,
        template_path: Path,
        values: Mapping[str, str],
        output_dir: Path,
        filename: str,
    ) -> Path:
        """Render the template and write it to output_dir/filename."""
        rendered = self.render(template_path, values)
        output_path = Path(output_dir) / filename
        output_path.write_text(rendered)
        logger.debug(f"Rendered {template_path} -> {output_path}")
        return output_path
