"""
Quality Dimension Assessors.

Heuristic scorers read the artifact's structure and look for keyword
families; LLMJudgeAssessor asks the collaborator instead. Scorers are looked
up per dimension through AssessorRegistry, so any object satisfying the
Assessor protocol can replace a built-in one.
"""

import asyncio
import logging
import statistics
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Mapping, NamedTuple, Optional, Protocol, Tuple

from pydantic import BaseModel, Field

from narrative_engine.core.errors import GenerationError, ValidationFailure
from narrative_engine.core.llm import GenerationOptions, LLMProvider
from narrative_engine.core.utils import artifact_text, clamp, count_terms
from narrative_engine.evaluation.dimensions import DimensionSpec
from narrative_engine.evaluation.models import DimensionScore
from narrative_engine.generation.models import (
    BeatSheet,
    CastingSheet,
    CharacterBreakdown,
    EpisodeScript,
    GenerationContext,
    SceneBreakdown,
    Storyboard,
)
from narrative_engine.generation.parser import StructuredResultParser

logger = logging.getLogger(__name__)


class Assessor(Protocol):
    """Protocol for dimension scorers."""

    async def assess(
        self,
        artifact: BaseModel,
        dimension: DimensionSpec,
        context: Optional[GenerationContext] = None,
    ) -> DimensionScore:
        ...


# Keyword families
PSYCHOLOGY_TERMS = ("motivation", "psychology", "internal", "emotion", "feeling", "thought", "mind", "soul")
MOTIVATION_TERMS = ("goal", "want", "need", "desire", "purpose", "drive", "ambition", "quest")
DEVELOPMENT_TERMS = ("change", "grow", "learn", "realize", "discover", "transform", "evolve", "develop")
RELATIONSHIP_TERMS = ("relationship", "connection", "bond", "tension", "conflict", "love", "trust", "betray")
SUBTEXT_TERMS = ("subtext", "underlying", "beneath", "hidden meaning", "really meant", "implied")
CONFLICT_TERMS = ("conflict", "argue", "disagree", "tension", "confrontation", "challenge")
CULTURAL_TERMS = ("culture", "tradition", "heritage", "authentic", "local", "community")
TENSION_TERMS = ("tension", "escalat", "build", "intensif", "heighten", "climax")
THEME_TERMS = ("theme", "meaning", "symbol", "represent", "significance", "metaphor")
HOOK_TERMS = (
    "secret", "mystery", "suddenly", "discover", "reveal", "danger",
    "threat", "disappear", "impossible", "truth", "betray", "choice",
)
VISUAL_TERMS = ("visual", "see", "watch", "look", "gaze", "view", "sight", "image")
CINEMATIC_TERMS = ("cinematic", "flow", "transition", "cut", "scene", "sequence")
LIGHTING_TERMS = ("light", "shadow", "silhouette", "glow", "neon", "dark", "color", "colour")
EMOTION_TERMS = ("emotion", "feel", "heart", "soul", "moved", "touched", "resonance", "vulnerab", "intens")

GENRE_TERMS: Dict[str, Tuple[str, ...]] = {
    "comedy": ("humor", "funny", "laugh", "joke", "amusing", "wit"),
    "horror": ("fear", "dread", "terror", "suspense", "dark", "ominous"),
    "thriller": ("fear", "dread", "terror", "suspense", "dark", "ominous"),
    "romance": ("love", "heart", "romantic", "chemistry", "attraction", "connection"),
    "mystery": ("mystery", "clue", "investigate", "secret", "hidden", "solve"),
    "drama": ("struggle", "family", "loss", "choice", "regret", "sacrifice"),
    "sci-fi": ("technology", "future", "space", "machine", "experiment", "signal"),
    "science fiction": ("technology", "future", "space", "machine", "experiment", "signal"),
    "fantasy": ("magic", "kingdom", "prophecy", "spell", "ancient", "creature"),
    "action": ("fight", "chase", "explosion", "escape", "mission", "danger"),
}


def _family(text_lower: str, terms: Tuple[str, ...], per_match: float, cap: float = 2.0) -> float:
    return min(count_terms(text_lower, terms) * per_match, cap)


def _sequential(numbers: List[int]) -> bool:
    return numbers == list(range(1, len(numbers) + 1))


class Assessment(NamedTuple):
    score: float
    evidence: List[str]
    actions: List[str]
    confidence: Optional[float] = None


class HeuristicAssessor(ABC):
    """Base class for deterministic content-based assessors."""

    name = "heuristic"
    supported: Tuple[type, ...] = ()  # empty means any artifact kind
    confidence = 0.6

    def __init__(self, improvement_threshold: float = 0.8):
        self.improvement_threshold = improvement_threshold

    async def assess(
        self,
        artifact: BaseModel,
        dimension: DimensionSpec,
        context: Optional[GenerationContext] = None,
    ) -> DimensionScore:
        if self.supported and not isinstance(artifact, self.supported):
            raise ValidationFailure(dimension.name, f"{self.name} cannot assess {type(artifact).__name__}")

        text = artifact_text(artifact)
        result = self.evaluate(artifact, text, text.lower(), context)
        score = round(clamp(result.score), 4)
        feedback = "; ".join(result.evidence) or f"No strong {dimension.name.replace('_', ' ')} signals found"
        actions = tuple(result.actions) if score < self.improvement_threshold else ()
        return DimensionScore(
            dimension=dimension.name,
            score=score,
            weight=dimension.weight,
            confidence=result.confidence if result.confidence is not None else self.confidence,
            feedback=feedback,
            improvement_actions=actions,
            assessor=self.name,
        )

    @abstractmethod
    def evaluate(
        self,
        artifact: BaseModel,
        text: str,
        text_lower: str,
        context: Optional[GenerationContext],
    ) -> Assessment:
        """Score the artifact; the returned score is clamped to [0, 1] by assess()."""
        pass


class FormattingAssessor(HeuristicAssessor):
    """Required fields populated, numbering sequential, choices well formed."""

    name = "formatting"
    confidence = 0.9

    def evaluate(self, artifact, text, text_lower, context):
        checks = self._checks(artifact)
        if not checks:
            raise ValidationFailure("formatting_compliance", f"no formatting rules for {type(artifact).__name__}")
        passed = sum(1 for ok, _ in checks if ok)
        actions = [action for ok, action in checks if not ok]
        return Assessment(passed / len(checks), [f"{passed}/{len(checks)} formatting checks passed"], actions)

    def _checks(self, artifact: BaseModel) -> List[Tuple[bool, str]]:
        if isinstance(artifact, BeatSheet):
            return [
                (bool(artifact.title.strip()), "Give the beat sheet a title"),
                (bool(artifact.opening_hook.strip()), "Write an opening hook"),
                (bool(artifact.cliffhanger.strip()), "Write a cliffhanger"),
                (all(b.purpose.strip() for b in artifact.beats), "State the purpose of every beat"),
                (_sequential([b.number for b in artifact.beats]), "Number beats sequentially from 1"),
            ]
        if isinstance(artifact, EpisodeScript):
            options = artifact.branching_options
            return [
                (bool(artifact.title.strip()), "Give the episode a title"),
                (bool(artifact.synopsis.strip()), "Add a synopsis"),
                (all(s.content.strip() for s in artifact.scenes), "Write content for every scene"),
                (_sequential([s.scene_number for s in artifact.scenes]), "Number scenes sequentially from 1"),
                (len(options) == 3, "Offer exactly three branching options"),
                (sum(1 for o in options if o.is_canonical) == 1, "Mark exactly one branching option as canonical"),
                (bool(artifact.episode_rundown.strip()), "Add an episode rundown"),
            ]
        if isinstance(artifact, SceneBreakdown):
            return [
                (_sequential([s.scene_number for s in artifact.scenes]), "Number scenes sequentially from 1"),
                (all(s.location.strip() for s in artifact.scenes), "Give every scene a location"),
                (all(s.summary.strip() for s in artifact.scenes), "Summarise every scene"),
            ]
        if isinstance(artifact, Storyboard):
            order = [(f.scene_number, f.shot_number) for f in artifact.frames]
            return [
                (all(f.shot_type.strip() for f in artifact.frames), "Specify a shot type for every frame"),
                (all(f.description.strip() for f in artifact.frames), "Describe every frame"),
                (order == sorted(order), "Order frames by scene and shot number"),
            ]
        if isinstance(artifact, CharacterBreakdown):
            names = [r.name.strip().lower() for r in artifact.roles]
            return [
                (all(names), "Name every role"),
                (all(r.description.strip() for r in artifact.roles), "Describe every role"),
                (len(set(names)) == len(names), "Remove duplicate roles"),
            ]
        if isinstance(artifact, CastingSheet):
            names = [r.character_name.strip().lower() for r in artifact.roles]
            return [
                (all(names), "Name the character for every role"),
                (all(r.age_range.strip() for r in artifact.roles), "Give an age range for every role"),
                (all(r.performance_notes.strip() for r in artifact.roles), "Add performance notes for every role"),
                (len(set(names)) == len(names), "Remove duplicate roles"),
            ]
        return []


class CharacterConsistencyAssessor(HeuristicAssessor):
    """Known characters referenced by name, with motivation, growth and relationships."""

    name = "character_consistency"

    def evaluate(self, artifact, text, text_lower, context):
        evidence = []
        actions = []
        characters = context.story.main_characters if context else ()
        if characters:
            missing = [c.name for c in characters if c.name.lower() not in text_lower]
            referenced = len(characters) - len(missing)
            consistency = min(referenced / len(characters) * 2, 2.0)
            if consistency > 1:
                evidence.append(f"{referenced}/{len(characters)} main characters referenced consistently")
            if missing:
                actions.append(f"Bring in the established characters: {', '.join(missing)}")
        else:
            consistency = 1.0

        psychology = _family(text_lower, PSYCHOLOGY_TERMS, 0.3)
        motivation = _family(text_lower, MOTIVATION_TERMS, 0.3)
        development = _family(text_lower, DEVELOPMENT_TERMS, 0.25)
        relationships = _family(text_lower, RELATIONSHIP_TERMS, 0.25)

        if psychology > 1:
            evidence.append("Rich psychological detail")
        if motivation > 1:
            evidence.append("Clear character motivations")
        else:
            actions.append("Make each character's want and need explicit")
        if development > 1:
            evidence.append("Character growth indicated")
        else:
            actions.append("Show how a character changes or learns something")
        if relationships > 1:
            evidence.append("Relationship dynamics explored")
        else:
            actions.append("Put the relationships between characters under pressure")

        depth = (psychology + motivation + development + relationships) / 8
        return Assessment(0.5 * consistency / 2 + 0.5 * depth, evidence, actions)


class DialogueAssessor(HeuristicAssessor):
    """Voice distinction, subtext, natural flow, conflict and authenticity in dialogue."""

    name = "dialogue"
    supported = (EpisodeScript,)

    def evaluate(self, artifact, text, text_lower, context):
        lines = [line for scene in artifact.scenes for line in scene.dialogue]
        quoted = sum(scene.content.count('"') for scene in artifact.scenes) // 2
        dialogue_count = len(lines) + quoted
        speakers = {line.character.strip().lower() for line in lines if line.character.strip()}
        evidence = []
        actions = []

        voice = 0.0
        if dialogue_count >= 10:
            voice += 1.0
            evidence.append(f"Substantial dialogue ({dialogue_count} lines)")
        else:
            actions.append("Dramatise more of the episode through dialogue")
        if len(speakers) >= 2:
            voice += 0.5
        if count_terms(text_lower, ("voice", "spoke", "said")):
            voice += 0.5

        subtext = _family(text_lower, SUBTEXT_TERMS, 0.4)
        if subtext > 0.5:
            evidence.append("Dialogue carries subtext")
        else:
            actions.append("Let characters talk around what they mean; add subtext")

        flow = 0.0
        if dialogue_count >= 5:
            flow += 0.5
        if count_terms(text_lower, ("natural", "conversation")):
            flow += 0.5
        if "..." in text or "—" in text or "…" in text:
            flow += 0.5
            evidence.append("Pauses and interruptions in speech")
        if lines and 20 <= statistics.mean(len(line.line) for line in lines) <= 160:
            flow += 0.5

        conflict = _family(text_lower, CONFLICT_TERMS, 0.4)
        if conflict > 0.5:
            evidence.append("Dialogue reveals conflict")
        else:
            actions.append("Use exchanges to surface disagreement between characters")

        cultural = _family(text_lower, CULTURAL_TERMS, 0.4)
        if cultural > 0.5:
            evidence.append("Culturally grounded speech")

        return Assessment((voice + subtext + min(flow, 2.0) + conflict + cultural) / 10, evidence, actions)


class NarrativeStructureAssessor(HeuristicAssessor):
    """Pacing, escalation, structural coherence, theme and progression."""

    name = "narrative_structure"
    supported = (EpisodeScript,)

    def evaluate(self, artifact, text, text_lower, context):
        evidence = []
        actions = []
        scenes = artifact.scenes

        pacing = 0.0
        if 2 <= len(scenes) <= 5:
            pacing += 1.0
            evidence.append(f"Workable scene count: {len(scenes)}")
        else:
            actions.append("Restructure the episode into 2-5 scenes")
        if count_terms(text_lower, ("pacing", "rhythm")):
            pacing += 0.5
        lengths = [len(s.content) for s in scenes if s.content]
        if lengths and max(lengths) <= 4 * max(min(lengths), 1):
            pacing += 0.5

        tension = _family(text_lower, TENSION_TERMS, 0.4)
        if tension > 0.5:
            evidence.append("Tension escalates")
        else:
            actions.append("Escalate the stakes from scene to scene")

        coherence = 0.0
        if artifact.title and artifact.synopsis:
            coherence += 0.5
        if scenes:
            coherence += 0.5
        if len(artifact.branching_options) == 3:
            coherence += 1.0
            evidence.append("Complete episode structure with three choices")
        else:
            actions.append("End on exactly three meaningful choices")

        theme = _family(text_lower, THEME_TERMS, 0.4)
        if theme > 0.5:
            evidence.append("Thematic elements integrated")

        progression = 0.0
        if len(text) > 1000:
            progression += 0.5
        if count_terms(text_lower, ("progress", "advance", "develop")):
            progression += 0.5
        if context and context.previous_choice and context.previous_choice.lower() in text_lower:
            progression += 0.5
            evidence.append("Follows up on the previous choice")
        if artifact.episode_rundown:
            progression += 0.5

        return Assessment((pacing + tension + coherence + theme + progression) / 10, evidence, actions)


class GenreAssessor(HeuristicAssessor):
    """Conventions of each declared genre show up in the text."""

    name = "genre"

    def evaluate(self, artifact, text, text_lower, context):
        genres = context.story.genre if context else ()
        coverages = []
        evidence = []
        actions = []
        for genre in genres:
            genre_lower = genre.lower()
            for key, terms in GENRE_TERMS.items():
                if key in genre_lower:
                    hits = count_terms(text_lower, terms)
                    coverages.append(min(hits / 3, 1.0))
                    if hits:
                        evidence.append(f"{genre} elements detected")
                    else:
                        actions.append(f"Lean into {genre} conventions")
                    break

        if not coverages:
            return Assessment(0.7, ["No recognised genre conventions to check"], [], confidence=0.3)

        score = statistics.mean(coverages)
        if count_terms(text_lower, ("tone", "mood")):
            score += 0.1
            evidence.append("Tone and mood addressed")
        return Assessment(score, evidence, actions)


class BeatStructureAssessor(HeuristicAssessor):
    """Beat count and per-beat completeness."""

    name = "beat_structure"
    supported = (BeatSheet,)
    confidence = 0.8

    def evaluate(self, artifact, text, text_lower, context):
        beats = artifact.beats
        checks = [
            (2.0, 3 <= len(beats) <= 6, "Use between three and six beats"),
            (1.0, all(b.purpose for b in beats), "State the purpose of every beat"),
            (1.0, all(b.location for b in beats), "Place every beat in a location"),
            (1.0, all(b.key_moments for b in beats), "List key moments for every beat"),
            (1.0, bool(artifact.opening_hook), "Open with a hook"),
            (1.0, bool(artifact.cliffhanger), "End on a cliffhanger"),
            (1.0, bool(artifact.theme), "Name the episode's theme"),
        ]
        total = sum(weight for weight, _, _ in checks)
        earned = sum(weight for weight, ok, _ in checks if ok)
        evidence = [f"{len(beats)} beats"]
        return Assessment(earned / total, evidence, [action for _, ok, action in checks if not ok])


class ConflictAssessor(HeuristicAssessor):
    """Every beat carries a conflict and the outline talks about tension."""

    name = "conflict"
    supported = (BeatSheet,)

    def evaluate(self, artifact, text, text_lower, context):
        beats = artifact.beats
        with_conflict = sum(1 for b in beats if b.conflict.strip())
        ratio = with_conflict / len(beats)
        family = min(count_terms(text_lower, CONFLICT_TERMS + TENSION_TERMS) / 4, 1.0)
        evidence = [f"{with_conflict}/{len(beats)} beats state a conflict"]
        actions = []
        if ratio < 1:
            actions.append("Give every beat an explicit obstacle or opposing force")
        if family < 0.5:
            actions.append("Make the opposing forces and stakes concrete")
        return Assessment(0.6 * ratio + 0.4 * family, evidence, actions)


class HookAssessor(HeuristicAssessor):
    """Opening hook and cliffhanger are substantial and intriguing."""

    name = "hook"
    supported = (BeatSheet,)

    def evaluate(self, artifact, text, text_lower, context):
        hook = artifact.opening_hook.strip()
        cliffhanger = artifact.cliffhanger.strip()
        pair_lower = f"{hook} {cliffhanger}".lower()
        evidence = []
        actions = []

        score = 0.3 * min(len(hook) / 40, 1.0) + 0.3 * min(len(cliffhanger) / 40, 1.0)
        intrigue = count_terms(pair_lower, HOOK_TERMS)
        score += min(intrigue * 0.1, 0.3)
        if intrigue:
            evidence.append("Hook raises intrigue")
        else:
            actions.append("Open on a question, secret or threat the audience needs answered")
        if "?" in hook or "!" in hook or "?" in cliffhanger:
            score += 0.1
        if len(cliffhanger) < 40:
            actions.append("Sharpen the cliffhanger into a concrete dilemma")
        return Assessment(score, evidence, actions)


class ShotVarietyAssessor(HeuristicAssessor):
    """Range of shot types and camera moves, several shots per scene."""

    name = "shot_variety"
    supported = (Storyboard,)

    def evaluate(self, artifact, text, text_lower, context):
        frames = artifact.frames
        shot_types = {f.shot_type.strip().lower() for f in frames if f.shot_type.strip()}
        movements = {f.camera_movement.strip().lower() for f in frames if f.camera_movement.strip()}
        per_scene: Dict[int, int] = {}
        for frame in frames:
            per_scene[frame.scene_number] = per_scene.get(frame.scene_number, 0) + 1
        multi = sum(1 for count in per_scene.values() if count >= 2) / len(per_scene)

        evidence = [f"{len(shot_types)} shot types, {len(movements)} camera movements"]
        actions = []
        if len(shot_types) < 4:
            actions.append("Mix wide, medium, close-up and insert shots")
        if len(movements) < 3:
            actions.append("Vary camera movement (static, pan, dolly, handheld)")
        if multi < 1:
            actions.append("Cover every scene with at least two shots")
        score = 0.5 * min(len(shot_types) / 4, 1.0) + 0.25 * min(len(movements) / 3, 1.0) + 0.25 * multi
        return Assessment(score, evidence, actions)


class VisualDetailAssessor(HeuristicAssessor):
    """Frame descriptions are specific about what the camera sees."""

    name = "visual_detail"
    supported = (Storyboard,)

    def evaluate(self, artifact, text, text_lower, context):
        frames = artifact.frames
        average = statistics.mean(len(f.description) for f in frames)
        with_elements = sum(1 for f in frames if f.visual_elements) / len(frames)
        hits = count_terms(text_lower, VISUAL_TERMS + CINEMATIC_TERMS + LIGHTING_TERMS)
        evidence = [f"Average frame description {average:.0f} characters"]
        actions = []
        if average < 120:
            actions.append("Describe composition, blocking and lighting in each frame")
        if with_elements < 1:
            actions.append("List key visual elements for every frame")
        if hits < 5:
            actions.append("Specify lighting, colour and transitions")
        score = 0.4 * min(average / 120, 1.0) + 0.3 * with_elements + 0.3 * min(hits / 5, 1.0)
        return Assessment(score, evidence, actions)


class SceneCoverageAssessor(HeuristicAssessor):
    """Scenes are numbered contiguously and each has enough shots."""

    name = "scene_coverage"
    supported = (Storyboard,)

    def evaluate(self, artifact, text, text_lower, context):
        per_scene: Dict[int, int] = {}
        for frame in artifact.frames:
            per_scene[frame.scene_number] = per_scene.get(frame.scene_number, 0) + 1
        coverage = statistics.mean(min(count / 2, 1.0) for count in per_scene.values())
        contiguous = sorted(per_scene) == list(range(1, len(per_scene) + 1))
        evidence = [f"{len(per_scene)} scenes covered"]
        actions = []
        if coverage < 1:
            actions.append("Add coverage shots to thinly covered scenes")
        if not contiguous:
            actions.append("Cover every scene in order without gaps")
        return Assessment(0.7 * coverage + (0.3 if contiguous else 0.0), evidence, actions)


class RoleCoverageAssessor(HeuristicAssessor):
    """Every known character is cast and exactly one role is the lead."""

    name = "role_coverage"
    supported = (CastingSheet, CharacterBreakdown)

    def evaluate(self, artifact, text, text_lower, context):
        if isinstance(artifact, CastingSheet):
            cast = {r.character_name.strip().lower() for r in artifact.roles}
            leads = sum(1 for r in artifact.roles if r.importance.lower() == "lead")
        else:
            cast = {r.name.strip().lower() for r in artifact.roles}
            leads = 1
        characters = context.story.main_characters if context else ()
        missing = [c.name for c in characters if c.name.lower() not in cast]
        coverage = 1 - len(missing) / len(characters) if characters else 1.0

        evidence = [f"{len(cast)} roles cast"]
        actions = []
        if missing:
            actions.append(f"Cast the missing characters: {', '.join(missing)}")
        if leads == 1:
            lead_score = 1.0
        elif leads > 1:
            lead_score = 0.5
            actions.append("Designate a single lead role")
        else:
            lead_score = 0.0
            actions.append("Mark the lead role")
        return Assessment(0.7 * coverage + 0.3 * lead_score, evidence, actions)


class PerformanceGuidanceAssessor(HeuristicAssessor):
    """Casting notes give performers something to work with."""

    name = "performance_guidance"
    supported = (CastingSheet,)

    def evaluate(self, artifact, text, text_lower, context):
        role_scores = []
        for role in artifact.roles:
            role_scores.append(
                0.4 * min(len(role.performance_notes) / 40, 1.0)
                + (0.2 if role.casting_suggestions else 0.0)
                + (0.2 if role.age_range.strip() else 0.0)
                + (0.2 if role.physical_traits.strip() else 0.0)
            )
        completeness = statistics.mean(role_scores)
        emotion = min(count_terms(text_lower, EMOTION_TERMS) / 3, 1.0)
        evidence = [f"Role guidance completeness {completeness:.2f}"]
        actions = []
        if completeness < 0.8:
            actions.append("Give every role an age range, physical traits, notes and casting suggestions")
        if emotion < 0.5:
            actions.append("Describe each role's emotional range and energy")
        return Assessment(0.8 * completeness + 0.2 * emotion, evidence, actions)


# --- LLM as judge ---

class JudgeVerdict(BaseModel):
    """Structured reply expected from the judge."""

    score: float = Field(..., ge=0.0, le=1.0)
    confidence: float = Field(0.5, ge=0.0, le=1.0)
    feedback: str = ""
    actions: List[str] = Field(default_factory=list)


JUDGE_SYSTEM_PROMPT = """You are a senior script editor assessing ONE quality dimension of a writers' room artifact.

Score the dimension from 0.0 (unusable) to 1.0 (award-winning). Be strict: 0.75 is solid professional work.

Output STRICT JSON ONLY:
{"score": <0.0-1.0>, "confidence": <0.0-1.0>, "feedback": "<two sentences>", "actions": ["<concrete fix>", ...]}"""

JUDGE_USER_TEMPLATE = """SERIES: {series_title}
GENRE: {genre}

DIMENSION: {dimension}
WHAT IT MEASURES: {description}

ARTIFACT ({kind}):
{artifact_json}

Assess only this dimension."""


class LLMJudgeAssessor:
    """Assessor that asks the collaborator for a score; neutral when the reply is unusable."""

    name = "llm_judge"
    NEUTRAL_SCORE = 0.5
    NEUTRAL_CONFIDENCE = 0.2

    def __init__(
        self,
        provider: LLMProvider,
        model: str,
        parser: Optional[StructuredResultParser] = None,
        temperature: float = 0.3,
        max_output_tokens: int = 600,
        timeout_seconds: float = 60.0,
        improvement_threshold: float = 0.8,
    ):
        self.provider = provider
        self.model = model
        self.parser = parser or StructuredResultParser()
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.timeout_seconds = timeout_seconds
        self.improvement_threshold = improvement_threshold

    def _neutral(self) -> JudgeVerdict:
        return JudgeVerdict(
            score=self.NEUTRAL_SCORE,
            confidence=self.NEUTRAL_CONFIDENCE,
            feedback="Judge reply unavailable, neutral score assigned",
        )

    async def assess(
        self,
        artifact: BaseModel,
        dimension: DimensionSpec,
        context: Optional[GenerationContext] = None,
    ) -> DimensionScore:
        prompt = JUDGE_USER_TEMPLATE.format(
            series_title=context.story.series_title if context else "Unknown",
            genre=", ".join(context.story.genre) if context else "Unknown",
            dimension=dimension.name,
            description=dimension.description or dimension.name.replace("_", " "),
            kind=getattr(artifact, "kind", type(artifact).__name__),
            artifact_json=artifact.model_dump_json(indent=2),
        )
        options = GenerationOptions(
            model=self.model,
            system_prompt=JUDGE_SYSTEM_PROMPT,
            temperature=self.temperature,
            max_output_tokens=self.max_output_tokens,
        )
        text = None
        try:
            text = await asyncio.wait_for(self.provider.generate(prompt, options), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning("Judge call for %s timed out", dimension.name)
        except GenerationError as e:
            logger.warning("Judge call for %s failed (%s): %s", dimension.name, e.reason, e)
        except OSError as e:
            logger.warning("Judge call for %s failed (transport): %s", dimension.name, e)

        outcome = self.parser.parse(text, JudgeVerdict, self._neutral)
        verdict = outcome.payload
        confidence = self.NEUTRAL_CONFIDENCE if outcome.used_fallback else verdict.confidence
        actions = tuple(verdict.actions) if verdict.score < self.improvement_threshold else ()
        return DimensionScore(
            dimension=dimension.name,
            score=verdict.score,
            weight=dimension.weight,
            confidence=confidence,
            feedback=verdict.feedback,
            improvement_actions=actions,
            assessor=self.name,
        )


# --- Registry and outcome wrapping ---

class AssessorRegistry:
    """Maps assessor type keys to assessors. Populate before use, then treat as read-only."""

    def __init__(self, assessors: Optional[Mapping[str, Assessor]] = None):
        self._assessors: Dict[str, Assessor] = dict(assessors or {})

    def register(self, key: str, assessor: Assessor) -> None:
        """Register an assessor, replacing any existing one under the same key."""
        self._assessors[key] = assessor

    def get(self, key: str) -> Optional[Assessor]:
        return self._assessors.get(key)

    def keys(self) -> Tuple[str, ...]:
        return tuple(self._assessors)

    @classmethod
    def default(cls, improvement_threshold: float = 0.8) -> "AssessorRegistry":
        """Registry holding every built-in heuristic assessor."""
        heuristics = (
            FormattingAssessor,
            CharacterConsistencyAssessor,
            DialogueAssessor,
            NarrativeStructureAssessor,
            GenreAssessor,
            BeatStructureAssessor,
            ConflictAssessor,
            HookAssessor,
            ShotVarietyAssessor,
            VisualDetailAssessor,
            SceneCoverageAssessor,
            RoleCoverageAssessor,
            PerformanceGuidanceAssessor,
        )
        return cls({assessor.name: assessor(improvement_threshold) for assessor in heuristics})


@dataclass(frozen=True)
class AssessmentOutcome:
    """Scored, skipped (no assessor registered) or failed dimension."""

    spec: DimensionSpec
    score: Optional[DimensionScore] = None
    skipped: bool = False
    error: Optional[str] = None

    @property
    def scored(self) -> bool:
        return self.score is not None


async def run_assessment(
    registry: AssessorRegistry,
    artifact: BaseModel,
    spec: DimensionSpec,
    context: Optional[GenerationContext] = None,
) -> AssessmentOutcome:
    """Run one assessor and wrap whatever happens into an AssessmentOutcome."""
    assessor = registry.get(spec.assessor_type)
    if assessor is None:
        logger.warning("No assessor registered for '%s', skipping dimension %s", spec.assessor_type, spec.name)
        return AssessmentOutcome(spec=spec, skipped=True)

    try:
        result = await assessor.assess(artifact, spec, context)
        if not isinstance(result, DimensionScore):
            raise ValidationFailure(spec.name, f"expected DimensionScore, got {type(result).__name__}")
        if not 0.0 <= result.score <= 1.0:
            raise ValidationFailure(spec.name, f"score {result.score!r} outside [0, 1]")
    except ValidationFailure as e:
        logger.warning("Assessor '%s' produced malformed data: %s", spec.assessor_type, e)
        return AssessmentOutcome(spec=spec, error=str(e))
    except Exception as e:
        # any assessor fault omits only its own dimension
        logger.warning("Assessor '%s' raised for %s: %s", spec.assessor_type, spec.name, e, exc_info=True)
        return AssessmentOutcome(spec=spec, error=f"{type(e).__name__}: {e}")

    return AssessmentOutcome(spec=spec, score=result.model_copy(update={"dimension": spec.name, "weight": spec.weight}))
