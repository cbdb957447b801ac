"""Built-in circuit templates — a fixed in-memory catalogue."""

import copy
from typing import Any

from circuit_backend.domain.entities import CircuitTemplate
from circuit_backend.domain.exceptions import EntityNotFoundError

_TEMPLATES: dict[str, CircuitTemplate] = {
    template.id: template
    for template in (
        CircuitTemplate(
            id="template_basic_circuit",
            name="Basic Circuit",
            description="A simple circuit with battery, resistor, and LED",
            category="basic",
            payload={
                "components": [
                    {"id": "battery1", "type": "battery", "x": 100, "y": 100},
                    {"id": "resistor1", "type": "resistor", "x": 200, "y": 100},
                    {"id": "led1", "type": "led", "x": 300, "y": 100},
                ],
                "connections": [
                    {"from": "battery1", "to": "resistor1"},
                    {"from": "resistor1", "to": "led1"},
                ],
            },
        ),
        CircuitTemplate(
            id="template_amplifier",
            name="Op-Amp Circuit",
            description="An operational amplifier circuit with resistors",
            category="amplifiers",
            payload={
                "components": [
                    {"id": "opamp1", "type": "opamp", "x": 200, "y": 150},
                    {"id": "r1", "type": "resistor", "x": 100, "y": 100},
                    {"id": "r2", "type": "resistor", "x": 100, "y": 200},
                ],
                "connections": [
                    {"from": "r1", "to": "opamp1"},
                    {"from": "r2", "to": "opamp1"},
                ],
            },
        ),
    )
}


class TemplateService:
    """Serves the template catalogue. Callers always receive copies."""

    def __init__(self, templates: dict[str, CircuitTemplate] | None = None):
        self._templates = templates if templates is not None else _TEMPLATES

    def list_templates(self) -> list[CircuitTemplate]:
        return [copy.deepcopy(t) for t in self._templates.values()]

    def get_template(self, template_id: str) -> CircuitTemplate:
        template = self._templates.get(template_id)
        if template is None:
            raise EntityNotFoundError("CircuitTemplate", template_id)
        return copy.deepcopy(template)

    def get_template_payload(self, template_id: str) -> dict[str, Any]:
        return self.get_template(template_id).payload
