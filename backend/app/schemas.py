"""Request bodies and the generated blueprint document."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class GenerateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1, max_length=10_000)


# ---------------------------------------------------------------------------
# IdeaBlueprint: document returned by the AI generation call.
# Field names are camelCase on the wire (techStack, pricingModel, userFlow).
# ---------------------------------------------------------------------------


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )


class Validation(_CamelModel):
    score: float = 0
    feedback: str = ""
    improvements: list[str] = []


class Features(_CamelModel):
    core: list[str] = []
    premium: list[str] = []
    future: list[str] = []


class TechStack(_CamelModel):
    frontend: list[str] = []
    backend: list[str] = []
    database: list[str] = []
    hosting: list[str] = []
    other: list[str] = []


class PricingTier(_CamelModel):
    name: str
    price: str
    features: list[str] = []


class PricingModel(_CamelModel):
    tiers: list[PricingTier] = []
    strategy: str = ""


class BlueprintTask(_CamelModel):
    title: str
    description: str = ""
    priority: Literal["High", "Medium", "Low"] | str = "Medium"
    category: str = ""
    status: Literal["Todo", "In Progress", "Done"] | None = None


class IdeaBlueprint(_CamelModel):
    validation: Validation = Validation()
    features: Features = Features()
    tech_stack: TechStack = TechStack()
    pricing_model: PricingModel = PricingModel()
    user_flow: str = ""
    tasks: list[BlueprintTask] = []
