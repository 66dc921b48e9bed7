"""Scenario generation prompt templates.

Contains prompts for:
- SCENARIO_GENERATOR_V1: Generate a short-form slide scenario for a theme
"""

# Scenario Generator v1 prompt
# Template placeholders: {theme}, {slide_count}, {slide_duration}, {total_duration}, {language}
SCENARIO_GENERATOR_V1 = """Write a scenario for a viral short vertical video (reel).

Theme: {theme}

The video lasts about {total_duration:.0f} seconds and has exactly {slide_count} slides
(about {slide_duration:.0f} seconds per slide).

Start with a hook that grabs attention instantly. The first slide should show a suspicious
object in front of the theme's setting, with a clickbait caption above it.

IMAGE PROMPTS
- Every image is post-processed by a model that SEPARATES THE MAIN SUBJECT FROM THE BACKGROUND.
- Each image must have ONE clear main subject (a person, an object, a symbol) that is easy to cut out.
- No busy compositions with many elements.
- The subject sits in the center or slightly above center.
- The background must be clearly distinguishable from the subject.

TEXT ON IMAGES
- ONLY the first slide (type "hook") has a caption, placed at the TOP of the image.
- All other slides must contain NO text at all. Narration is added separately.

Example prompt with caption (first slide only):
cinematic photograph of a solitary hooded hacker figure, centered, dramatic lighting from behind
creating a silhouette effect. The figure stands out clearly against a dark blurred background with
subtle blue digital elements. Clear separation between subject and background. Superimposed at the
TOP of the image in a bold, glitched font: 'WHO IS HE?' -- moody, atmospheric, dark, cinematic

Example prompt without text (other slides):
dramatic close-up portrait of a mysterious figure in shadow, one hand holding a vintage phone
glowing with ethereal light. The figure is the clear focal point, well-defined against a softly
blurred background of abstract digital patterns. -- enigmatic, cinematic, atmospheric

LANGUAGES
- text_to_tts: {language}
- z_image_prompt: English

OUTPUT FORMAT (JSON)
Return ONLY a JSON object with this exact structure:
{{
  "slides": [
    {{
      "type": "hook",
      "text_to_tts": "narration text in {language}",
      "z_image_prompt": "english prompt, caption ONLY on the first slide"
    }}
  ]
}}

Use "hook" for the first slide and "body" for the rest. No extra fields, no commentary."""
