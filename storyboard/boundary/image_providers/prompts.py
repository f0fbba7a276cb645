"""Image prompt templates for storyboard chunks.

Builds the text prompt sent to an image backend from a description, its
kind (raw chunk, analyzed scene, analyzed symbol) and the visual style.

Dependencies: None (pure prompt templates)
System role: Instruction set for image provider adapters
"""

from storyboard.boundary.image_providers.base import (
    DescriptionKind,
    GenerationOptions,
    ImageStyle,
)

NO_TEXT_RULE = "- No text or words in the image"

PICTOGRAM_REQUIREMENTS = """Style requirements:
- Pictogram/icon style with simple geometric shapes
- Pure black background (solid #000000)
- Use ONLY white color (#FFFFFF) for all elements
- Simple human figures with clear facial expressions
- Rounded heads with expressive eyes and mouth
- Full body stick-figure style or simple geometric bodies
- Minimalist design with high contrast (white on black)
- No gradients, no other colors, only pure white on pure black
""" + NO_TEXT_RULE

SYMBOL_REQUIREMENTS = """Style requirements:
- A single centered object or symbol, no people
- Pictogram/icon style with simple geometric shapes
- Pure black background (solid #000000)
- Use ONLY white color (#FFFFFF) for all elements
- Bold silhouette that reads at small sizes
- No gradients, no other colors, only pure white on pure black
""" + NO_TEXT_RULE

STYLE_REQUIREMENTS: dict[ImageStyle, str] = {
    ImageStyle.INFOGRAPHIC: """Style requirements:
- Modern infographic design
- Simple, clean shapes, no lines, Must be filled
- Flat design with minimal details
- Professional and informative look
- Use ONLY one single color: {color}
- No gradients, no multiple colors, just one solid color
- No background (transparent)
- rounded face with no nose
""" + NO_TEXT_RULE,
    ImageStyle.DRAWING: """Style requirements:
- Hand-drawn, sketch-like appearance
- Organic lines and natural imperfections
- Artistic and expressive style
- Pencil or pen drawing aesthetic
- Primary color: {color}
- No background (transparent)
""" + NO_TEXT_RULE,
    ImageStyle.ILLUSTRATION: """Style requirements:
- Rich, detailed illustration style
- Artistic and creative interpretation
- More complex visual elements
- Professional illustration quality
- Primary color: {color}
- No background (transparent)
""" + NO_TEXT_RULE,
    ImageStyle.ABSTRACT: """Style requirements:
- Abstract, conceptual design
- Geometric or organic abstract forms
- Creative interpretation of the content
- Modern abstract art style
- Primary color: {color}
- No background (transparent)
""" + NO_TEXT_RULE,
}

STYLE_OPENERS: dict[ImageStyle, str] = {
    ImageStyle.INFOGRAPHIC: "Create a clean, minimalist infographic-style illustration",
    ImageStyle.DRAWING: "Create a hand-drawn style illustration",
    ImageStyle.ILLUSTRATION: "Create a detailed artistic illustration",
    ImageStyle.ABSTRACT: "Create an abstract artistic representation",
}

CHUNK_FOCUS = (
    "Focus on the main visual concept or action described in the script and "
    "create a visual representation that captures the essence of what's being "
    "described or discussed."
)

SCENE_ANALYSIS_SYSTEM_PROMPT = """You turn short narration segments from a video script into a single visual scene for an illustrator.

Describe in one or two sentences:
- Who is in the scene (simple human figures, how many)
- What they are doing and how they feel (facial expression, body language)
- The one or two props that make the moment recognisable

Rules:
- Describe only what can be drawn; no camera directions, no text, no captions
- Keep it under 60 words
- Return the description only, without preamble or quotes"""

SYMBOL_ANALYSIS_SYSTEM_PROMPT = """You pick the single object or symbol that best represents a short narration segment from a video script.

Return one short phrase naming the object and its most recognisable visual detail, for example "an hourglass with sand running out" or "a padlock with a broken shackle".

Rules:
- One object only, no people, no text
- Under 15 words
- Return the phrase only, without preamble or quotes"""


def build_image_prompt(description: str, options: GenerationOptions) -> str:
    """
    Build the image prompt for a description.

    Scene and symbol descriptions always use the pictogram look of the
    two-stage pipeline; raw chunk text uses the requested style.

    Args:
        description: Chunk text or analyzed description
        options: Rendering options including style, color and kind

    Returns:
        str: Prompt for the image backend
    """
    if options.kind == DescriptionKind.SCENE:
        return f"Create a pictogram-style illustration of: {description}\n\n{PICTOGRAM_REQUIREMENTS}"

    if options.kind == DescriptionKind.SYMBOL:
        return f"Create a pictogram-style icon of: {description}\n\n{SYMBOL_REQUIREMENTS}"

    style = options.style if options.style in STYLE_REQUIREMENTS else ImageStyle.INFOGRAPHIC
    opener = STYLE_OPENERS[style]
    requirements = STYLE_REQUIREMENTS[style].format(color=options.color)
    return (
        f'{opener} based on this script content: "{description}".\n'
        f"{requirements}\n\n{CHUNK_FOCUS}"
    )
