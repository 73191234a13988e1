"""
Declarative template identity.

Identity is metadata of the template *type*, never of an instance. It is
attached explicitly by the registry at registration time (see
``registry.TemplateRegistry.register``) and is immutable afterwards.
"""

from typing import Literal, Tuple

from pydantic import BaseModel, ConfigDict, Field

from pdffer.app.templates.path import ROOT_REGISTRY, get_template_path


SCOPE_PROTOTYPE = "prototype"
SCOPE_SINGLETON = "singleton"

SCOPE_DEFAULT = SCOPE_PROTOTYPE

TemplateScope = Literal["prototype", "singleton"]


class TemplateIdentity(BaseModel):
    """
    Group, name and scope of a template type.

    Scope is a hint to the factory about instance reuse:
    - ``prototype``: a fresh instance per request
    - ``singleton``: one shared instance; concurrent use is unsafe and
      must be excluded by the surrounding system
    """

    group: str = Field(
        default=ROOT_REGISTRY,
        description="Namespace of the template. Empty means the root namespace.",
    )

    name: str = Field(
        ...,
        min_length=1,
        description="Template name, unique within its group.",
    )

    scope: TemplateScope = Field(
        default=SCOPE_DEFAULT,
        description="Instance reuse hint for the template factory.",
    )

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    @property
    def path(self) -> str:
        return get_template_path(self.group, self.name)

    def as_tuple(self) -> Tuple[str, str]:
        return self.group, self.name
