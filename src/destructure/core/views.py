"""
View type emission.

A view is a slotted class holding a single instance of the original record.
Each field becomes a property reading (and, for writable views, writing) the
instance's own attribute, so no field value is copied. Fields marked
``Skip`` get no property.

Writable views are scoped: the operation that creates one clears its slot
once the callback returns, after which every property raises
``ReferenceError``.
"""

from typing import List

from destructure.core.emit import class_header, docstring, emit, indent, quote
from destructure.core.naming import VIEW_TARGET_SLOT
from destructure.model import RecordTypeModel


def build_view_class(model: RecordTypeModel, name: str, writable: bool, scope: str) -> str:
  """
  Emits a view class over ``model``'s fields.

  Args:
      model: The record being viewed.
      name: Name of the view class.
      writable: Whether properties get setters writing through to the record.
      scope: Operation the view belongs to, used in docstrings and errors
          (e.g. ``Point.substitute()``).

  Returns:
      str: The class source.
  """
  slot = VIEW_TARGET_SLOT
  original = quote(model.apply_generics(model.type_name))
  expired = f'raise ReferenceError("{name} used outside of {scope}")'

  if writable:
    summary = f"Writable view over the fields of ``{model.type_name}``. Valid only inside ``{scope}``."
  else:
    summary = f"Read-only view over the fields of ``{model.type_name}``, returned by ``{scope}``."

  body: List[str] = [
    *docstring(summary),
    "",
    f'__slots__ = ("{slot}",)',
    "",
    f"def __init__(self, target: {original}) -> None:",
    *indent([f"self.{slot} = target"]),
  ]

  for f in model.exposed_fields:
    annotation = quote(f.declared_type)
    getter = [f"return self.{slot}.{f.name}"]
    if writable:
      getter = [f"if self.{slot} is None:", *indent([expired]), *getter]
    body += [
      "",
      "@property",
      f"def {f.name}(self) -> {annotation}:",
      *indent(getter),
    ]
    if writable:
      body += [
        "",
        f"@{f.name}.setter",
        f"def {f.name}(self, value: {annotation}) -> None:",
        *indent(
          [
            f"if self.{slot} is None:",
            *indent([expired]),
            f'object.__setattr__(self.{slot}, "{f.name}", value)',
          ]
        ),
      ]

  return emit([class_header(name, model), *indent(body)])
