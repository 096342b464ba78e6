"""Domain Studio configurations.

Each Studio shares the same Orchestrator and differs only in theme tokens,
the instruction template handed to the generator, example prompts, and
optionally its own tier → model map.
"""

from dataclasses import dataclass, field

from studio.config import get_config


@dataclass(frozen=True)
class DomainConfig:
    name: str
    title: str
    subtitle: str
    theme_tokens: dict = field(default_factory=dict)
    instruction_template: str = ""
    example_prompts: tuple[str, ...] = ()
    tier_models: dict = field(default_factory=dict)  # Empty = use config.yaml tier_models.
    noun: str = "application"  # Used by the guided prompt builder.

    def model_for(self, tier: str) -> dict:
        """Return {provider, model} for a tier, domain override first."""
        if tier in self.tier_models:
            return self.tier_models[tier]
        return get_config()["tier_models"][tier]


_BUSINESS = DomainConfig(
    name="business",
    title="Business Studio",
    subtitle="AI-Powered Business Applications",
    theme_tokens={"primary": "#2563eb", "accent": "#1e40af", "badge": "Business OS"},
    noun="business application",
    instruction_template="""\
You build professional, data-driven business tools. Every application should have:
- A clean, corporate visual language with restrained colour use
- Dashboards that surface the key metrics first
- Tables, charts and reporting views with filtering, sorting and search
- Export affordances (CSV, PDF) where data is shown
- Layouts that work on desktop and tablet
Favour business value and data clarity over decoration. Use Recharts for charts.""",
    example_prompts=(
        "Build a CRM dashboard with a pipeline view",
        "Create a sales dashboard with KPI metrics",
        "Design an invoice generator and tracker",
        "Make a project management kanban board",
    ),
)

_EDUCATION = DomainConfig(
    name="education",
    title="Education Studio",
    subtitle="AI-Powered Educational Content",
    theme_tokens={"primary": "#4f46e5", "accent": "#6366f1", "badge": "Education OS"},
    noun="learning application",
    instruction_template="""\
You build engaging, pedagogy-first learning experiences. Every application should have:
- Explanations pitched at the learner's age or grade level
- Interactive elements such as quizzes, drag-and-drop or step-throughs
- Worked examples and immediate feedback on answers
- Accessible typography and colour contrast for diverse learners
- Light gamification (progress, streaks, scores) where it helps
Make the learning objective obvious on screen.""",
    example_prompts=(
        "Build a quiz app about the water cycle",
        "Create a multiplication practice game for 3rd graders",
        "Design a timeline explorer for World War II",
        "Make a flashcard app for vocabulary learning",
    ),
)

_HEALTH = DomainConfig(
    name="health",
    title="Health Studio",
    subtitle="AI-Powered Health Applications",
    theme_tokens={"primary": "#ef4444", "accent": "#f43f5e", "badge": "Health OS"},
    noun="health application",
    instruction_template="""\
You build patient-centred, privacy-conscious health tools. Every application should have:
- Clear, accessible presentation of health information
- Simple logging and tracking flows usable one-handed on mobile
- Charts for health metrics over time
- Calm, empathetic copy and privacy-first patterns
- A visible disclaimer that the app is informational only and users should
  consult a healthcare professional for medical advice""",
    example_prompts=(
        "Build a medication tracker with reminders",
        "Create a symptom checker interface",
        "Make a patient appointment scheduler",
        "Create a blood pressure log with charts",
    ),
)

_SUSTAINABILITY = DomainConfig(
    name="sustainability",
    title="Sustainability Studio",
    subtitle="AI-Powered Environmental Applications",
    theme_tokens={"primary": "#16a34a", "accent": "#65a30d", "badge": "Sustainability OS"},
    noun="sustainability tool",
    instruction_template="""\
You build environmental impact and ESG tools. Every application should have:
- Environmental KPIs and carbon calculations shown with their units
- Goal tracking with progress visualisations
- Green and earth-tone colour schemes
- Actionable recommendations next to the numbers
Use Recharts for environmental data visualisation.""",
    example_prompts=(
        "Build a carbon footprint calculator",
        "Create an ESG reporting dashboard",
        "Design a renewable energy tracker",
        "Build a water usage monitoring dashboard",
    ),
)

_EXPERIMENTS = DomainConfig(
    name="experiments",
    title="UI Builder",
    subtitle="Experimental UI Generator",
    theme_tokens={"primary": "#a855f7", "accent": "#7c3aed", "badge": "Beta"},
    noun="component",
    instruction_template="""\
You generate high-quality, responsive, interactive UI components.
- Use React function components and Tailwind CSS
- Use lucide-react style inline SVG icons where icons help
- Add tasteful transitions for interactive elements
Always return the full code for the component.""",
    example_prompts=(
        "Create a responsive navbar",
        "Make a landing page for a coffee shop",
        "Design a credit card checkout form",
        "Build a pricing table with a monthly/yearly toggle",
    ),
)

DOMAINS: dict[str, DomainConfig] = {
    d.name: d for d in (_BUSINESS, _EDUCATION, _HEALTH, _SUSTAINABILITY, _EXPERIMENTS)
}


def get_domain(name: str | None = None) -> DomainConfig:
    """Return a domain config by name, falling back to the configured default."""
    if name and name in DOMAINS:
        return DOMAINS[name]
    default = get_config().get("default_domain", "experiments")
    return DOMAINS.get(default, _EXPERIMENTS)


_DEVICE_FOCUS = {
    "desktop": "desktop-focused design optimized for larger screens",
    "mobile": "mobile-first design optimized for smartphones",
    "both": "responsive design for both mobile and desktop",
}


def compose_guided_goal(
    noun: str,
    purpose: str,
    theme: str = "light",
    device_focus: str = "both",
    details: str = "",
    inspiration: str = "",
    extra: str = "",
) -> str:
    """Build goal text from the guided form fields."""
    focus = _DEVICE_FOCUS.get(device_focus, _DEVICE_FOCUS["both"])
    return (
        f"Create a {noun} with the following specifications:\n\n"
        f"Purpose: {purpose}\n"
        f"Theme: {theme}\n"
        f"Device Focus: {focus}\n"
        f"Details: {details}\n"
        f"Inspiration: {inspiration}\n"
        f"Additional Information: {extra}\n\n"
        f"Please build this {noun} with {focus}."
    )
