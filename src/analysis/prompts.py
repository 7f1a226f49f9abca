# src/analysis/prompts.py — v1
"""Prompt builders for the two analysis flows.

Reference documents live in the cached context, so prompts carry only the
per-request data and the required answer format.
"""

from __future__ import annotations

from inspectcache.analysis.models import DefectEntry

# Dent depth limit as a fraction of pipe OD.
DENT_OD_RATIO = 0.06


def wall_loss_percent(defect: DefectEntry) -> float | None:
    """Metal-loss depth as a percentage of nominal wall thickness."""
    if defect.is_hardspot:
        return None
    return defect.depth / defect.pipe_nwt * 100


def build_defect_prompt(defect: DefectEntry) -> str:
    """Build the defect-only analysis prompt for a client's procedures."""
    depth_label = "Max HB" if defect.is_hardspot else "inches"
    loss = wall_loss_percent(defect)
    loss_text = f"{loss:.1f}" if loss is not None else None

    lines = [
        "DEFECT ANALYSIS REQUEST:",
        "",
        "PIPE SPECIFICATIONS:",
        f"- Pipe OD: {defect.pipe_od:g} inches",
        f"- Pipe NWT: {defect.pipe_nwt:g} inches",
        "",
        "DEFECT INFORMATION:",
        f"- Type: {defect.defect_type}",
        f"- Length: {defect.length:g} inches",
        f"- Width: {defect.width:g} inches",
        f"- Depth/HB: {defect.depth:g} {depth_label}",
    ]
    if loss_text is not None:
        lines.append(
            f"- Wall Loss: {loss_text}% ({defect.depth:g} / {defect.pipe_nwt:g})"
        )
    lines.append(f"- Client: {defect.client_name}")
    if defect.notes:
        lines.append(f"- Notes: {defect.notes}")

    dent_limit = defect.pipe_od * DENT_OD_RATIO
    metal_loss_rule = "- For metal loss: evaluate using RSTRENG/B31G if 10-80% wall loss"
    if loss_text is not None:
        metal_loss_rule += f" (Current: {loss_text}% wall loss)"

    lines += [
        "",
        "TASK:",
        f"Analyze this defect based on the {defect.client_name} procedures in your context.",
        "",
        "Provide:",
        "1. Whether repair is required (based on procedure thresholds)",
        "2. Recommended repair method (reference specific procedures)",
        "3. Severity assessment (low/medium/high/critical)",
        "4. Specific procedure references (sections, pages, tables)",
        "5. Clear recommendations for the field technician",
        "",
        "IMPORTANT:",
        "- Use exact thresholds from procedures and pipe specifications",
        "- Reference specific sections/tables",
        "- Be conservative - recommend Asset Integrity if uncertain",
        "- For hardspots: check if exceeds 300 BHN or cracking risk",
        f"- For dents: check if exceeds 6% of pipe OD "
        f'(6% of {defect.pipe_od:g}" = {dent_limit:.3f}")',
        metal_loss_rule,
        "- Consider pipe diameter and wall thickness in structural integrity assessment",
        "",
        "RESPONSE FORMAT (CRITICAL):",
        "Output ONLY a valid JSON object. NO markdown, NO conversational text.",
        "",
        "{",
        '  "repairRequired": true/false,',
        '  "repairType": "specific method or null",',
        '  "severity": "low/medium/high/critical",',
        '  "recommendations": "detailed explanation with procedure references",',
        '  "procedureReference": "specific sections/tables/pages",',
        '  "confidence": "high/medium/low"',
        "}",
    ]
    return "\n".join(lines)


IDENTIFICATION_PROMPT = """\
DEFECT IDENTIFICATION FROM PHOTO:

Analyze the attached photo and identify the top 3 most likely defect types based on visual characteristics described in the reference materials.

For each of the top 3 matches, provide:
1. Defect type name (e.g., "Corrosion", "Dent", "Crack", etc.)
2. Confidence level: "high" (80-100%), "medium" (50-79%), or "low" (0-49%)
3. Confidence score: specific percentage (0-100)
4. Visual indicators: list of specific features you identified in the photo
5. Reasoning: explanation for why this defect type matches the photo
6. Severity (optional): if visible characteristics allow assessment, provide "low", "medium", "high", or "critical"

Consider:
- Surface texture and appearance
- Color variations
- Shape and geometry
- Pattern characteristics
- Extent and distribution
- Any visible measurements or scale

RESPONSE FORMAT (CRITICAL):
Output ONLY a valid JSON object. NO markdown, NO conversational text, NO code fences.

{
  "matches": [
    {
      "defectType": "string",
      "confidence": "high|medium|low",
      "confidenceScore": 0-100,
      "visualIndicators": ["indicator1", "indicator2", "indicator3"],
      "reasoning": "detailed explanation",
      "severity": "low|medium|high|critical|unknown"
    }
  ]
}

Provide exactly 3 matches in descending order of confidence."""


def build_identification_prompt() -> str:
    """Prompt accompanying a photo for defect identification."""
    return IDENTIFICATION_PROMPT
