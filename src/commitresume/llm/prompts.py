"""Prompt templates for resume synthesis."""

from commitresume.analysis.digest import directory_of, technology_of
from commitresume.models.analysis import Digest
from commitresume.models.commit import Commit

MAX_PROMPT_AREAS = 5

RESPONSE_FORMAT = """Return JSON:
{
  "bulletPoints": [
    {
      "text": "Resume bullet point text",
      "actionVerb": "Primary action verb",
      "businessImpact": "Business value description",
      "confidence": 0.8
    }
  ],
  "isTrivial": false,
  "reasoning": "Brief explanation"
}"""


class PromptTemplates:
    """Collection of prompt templates for resume bullet generation."""

    @staticmethod
    def resume_bullet_points(digest: Digest) -> str:
        """Generate prompt summarizing a whole body of work.

        Args:
            digest: Bounded reduction of the significant commits

        Returns:
            Formatted prompt
        """
        messages = "\n".join(digest.sample_messages)
        changes = "\n\n".join(digest.sample_changes) or "No significant code changes detected"
        areas = ", ".join(digest.directories[:MAX_PROMPT_AREAS])

        return f"""You are a professional resume writer. Analyze this collection of Git commits and generate 2-4 high-level resume bullet points that summarize the overall work accomplished.

REQUIREMENTS:
- Generate 2-4 bullet points in total, not one per commit
- Focus on overall achievements and business impact
- Start with strong action verbs (Developed, Implemented, Built, Optimized, etc.)
- Emphasize results and business value over implementation details
- Use quantifiable metrics when possible
- Keep language accessible to non-technical recruiters
- Keep each bullet point to 1-2 lines
- Mention the domain (medical imaging, finance, e-commerce, ...) when the commits make it clear, while emphasizing transferable skills

OVERALL WORK CONTEXT:
Total Commits: {digest.count}
Total Changes: +{digest.total_additions}/-{digest.total_deletions} lines
Technologies: {", ".join(digest.technologies)}
Areas: {areas}

COMMIT MESSAGES:
{messages}

KEY CODE CHANGES:
{changes}

DOMAIN HINTS:
- Medical/Healthcare: brain, neuron, medical, imaging, DICOM, annotation, microscopy
- Finance: trading, portfolio, market, transaction, payment, banking
- E-commerce: cart, checkout, product, inventory, order, shipping
- Gaming: game, player, level, score, physics, rendering
- IoT/Hardware: sensor, device, firmware, embedded, signal
- AI/ML: model, training, prediction, classification, neural

EXAMPLES:
- "Developed user authentication system that improved security and reduced login issues by 40%"
- "Built medical imaging annotation platform with 3D visualization for neuroscience research"
- "Implemented automated trading system that processed 10,000+ transactions daily"

{RESPONSE_FORMAT}

Focus on the big picture: what was the overall goal and impact of this work?"""

    @staticmethod
    def commit_bullet_points(commit: Commit) -> str:
        """Generate prompt for a single commit.

        Args:
            commit: The commit to describe

        Returns:
            Formatted prompt
        """
        extensions = list(dict.fromkeys(filter(None, (technology_of(f.filename) for f in commit.files))))
        directories = list(dict.fromkeys(filter(None, (directory_of(f.filename) for f in commit.files))))

        file_line = f"{len(commit.files)} files"
        if extensions:
            file_line += f" ({', '.join(extensions)})"

        previews = []
        for changed in commit.files[:5]:
            patch = changed.patch or ""
            if not patch:
                excerpt = "No preview available"
            elif len(patch) > 200:
                excerpt = patch[:200] + "..."
            else:
                excerpt = patch
            previews.append(f"{changed.filename} ({changed.status}):\n{excerpt}")

        code_changes = "\n\n".join(previews) or "No file changes available"
        areas = f"Areas: {', '.join(directories[:3])}" if directories else ""

        return f"""You are a professional resume writer. Convert this Git commit into professional resume bullet points emphasizing business impact.

REQUIREMENTS:
- Start with action verbs (Developed, Implemented, Built, Optimized, Created, etc.)
- Focus on business impact and results, not technical details
- Use quantifiable metrics when possible
- Keep language accessible to non-technical recruiters
- 1-2 lines maximum per bullet point
- Skip trivial changes

COMMIT:
Message: {commit.message}
Files: {file_line}
Changes: +{commit.stats.additions}/-{commit.stats.deletions} lines
{areas}

CODE CHANGES:
{code_changes}

{RESPONSE_FORMAT}

If trivial, set isTrivial=true and return an empty bulletPoints array."""
