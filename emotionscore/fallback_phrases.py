##########################################################################
#                                                                        #
#  This file (fallback_phrases.py) holds the phrase pools and topic      #
#  table used by the rule-based fallback generator.                      #
#                                                                        #
##########################################################################

from __future__ import annotations

from dataclasses import dataclass, field, replace
import logging
from pathlib import Path
import re
from typing import Any, Mapping

from emotionscore.rule_files import read_rule_file


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TopicRule:
    name: str
    pattern: str
    paragraphs: tuple[str, ...]
    confidence: float = 0.9
    # Subtopics are only checked once their parent topic has matched.
    parent: str | None = None
    compiled: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "compiled", re.compile(self.pattern, re.IGNORECASE))


GREETINGS = (
    "Hello there!",
    "Hi, good to see you.",
    "Hey! Thanks for stopping by.",
    "Hello! It's nice to hear from you.",
    "Hi there, welcome back.",
    "Hey, glad you reached out.",
    "Greetings! I'm here and listening.",
    "Hello, I'm EmotionScore.",
    "Hi! Great to connect with you.",
    "Hey there, how's everything going?",
)

HELP_OFFERS = (
    "Tell me a bit more about what you need and we can work through it together.",
    "What would you like a hand with? Share as much detail as you're comfortable with.",
    "Let me know what's on your mind and I'll do my best to point you in a useful direction.",
    "Describe the situation and we can figure out the next step together.",
    "Walk me through what's going on and I'll help where I can.",
)

HOW_ARE_YOU_REPLY = "I'm functioning well, thank you for asking! More importantly, how are you feeling today?"

POSITIVE_ACKNOWLEDGMENTS = (
    "That sounds really encouraging.",
    "I can hear the good energy in that.",
    "It's great that things are looking up.",
    "That's a nice thing to share.",
    "I'm glad to hear it.",
    "That positivity comes through clearly.",
    "Sounds like you're in a good place with this.",
    "That's genuinely good news.",
    "It's wonderful when things click like that.",
    "Your enthusiasm is contagious.",
)

NEGATIVE_ACKNOWLEDGMENTS = (
    "That sounds genuinely hard.",
    "I'm sorry you're dealing with that.",
    "It makes sense to feel worn down by this.",
    "That's a lot to carry.",
    "I hear how frustrating this is.",
    "It's understandable to feel that way.",
    "Thank you for being honest about how it's going.",
    "That would get to most people.",
    "Rough days like that can really pile up.",
    "Your feelings about this are valid.",
)

NEUTRAL_ACKNOWLEDGMENTS = (
    "I see what you mean.",
    "Thanks for sharing that.",
    "That's a fair point to raise.",
    "Got it.",
    "That's worth thinking about.",
    "I follow you.",
    "Okay, let's look at that.",
    "Understood.",
    "That's an interesting angle.",
    "Noted, let's dig in.",
)

CONFUSION_ELABORATIONS = (
    "Let's slow down and take this one piece at a time.",
    "It's completely normal for this to feel tangled at first.",
    "A simpler starting point might make the rest easier to follow.",
    "We can break this into smaller parts so it's easier to see.",
    "Sometimes an example clears things up faster than a definition.",
    "If any part is unclear, point at it and we'll unpack it.",
)

INTEREST_ELABORATIONS = (
    "There's a lot worth exploring here.",
    "Curiosity like that tends to lead somewhere good.",
    "This is one of those subjects that keeps opening new doors.",
    "There are a few angles on this that are fun to compare.",
    "It's a great thing to be curious about.",
    "The deeper layers of this are surprisingly rich.",
)

CONTINUATION_PROMPTS = (
    "What part of this matters most to you right now?",
    "Would you like to go deeper on any of this?",
    "How does that fit with what you've been experiencing?",
    "Is there a specific piece you'd like to focus on next?",
    "What would be most helpful to talk through from here?",
    "Tell me more about how this has been for you.",
    "Where would you like to take the conversation from here?",
    "What else has been on your mind about this?",
)


SUBTOPIC_CONFIDENCE = 0.85

# Ordered: the first top-level match is the main topic, subtopics follow their parent.
TOPIC_RULES = (
    TopicRule(
        "mathematics",
        r"\b(math|maths|mathematics|arithmetic|algebra|equations?|geometry|calculus|trigonometry|statistics|"
        r"probability|theorems?|formulas?|fractions?|polynomials?|quadratic|derivatives?|integrals?)\b",
        (
            "Mathematics rewards patience: most hard problems become manageable once you name what is known and what is being asked.",
            "A lot of mathematical insight comes from trying small cases first and looking for the pattern they share.",
            "It often helps to treat an equation like a balance, where every step keeps both sides equal.",
            "Checking an answer by plugging it back in is a small habit that catches a surprising number of slips.",
        ),
    ),
    TopicRule(
        "algebra",
        r"\b(algebra|algebraic|equations?|variables?|polynomials?|quadratic|linear|exponential|logarithms?)\b",
        (
            "In algebra, a letter is just a placeholder for a number you have not pinned down yet.",
            "Whatever you do to one side of an equation, do to the other, and the unknown usually comes out on its own.",
            "Quadratics tend to feel friendlier once you see factoring, completing the square and the formula as three routes to the same place.",
        ),
        confidence=SUBTOPIC_CONFIDENCE,
        parent="mathematics",
    ),
    TopicRule(
        "geometry",
        r"\b(geometry|angles?|triangles?|circles?|polygons?|area|volume|perimeter|pythagorean|theorems?)\b",
        (
            "Geometry problems almost always get easier once there is a clear, labelled sketch in front of you.",
            "The Pythagorean theorem shows up in far more places than right triangles on a worksheet, from screen sizes to map distances.",
            "Area and perimeter measure different things, which is why two shapes can share one and differ wildly on the other.",
        ),
        confidence=SUBTOPIC_CONFIDENCE,
        parent="mathematics",
    ),
    TopicRule(
        "calculus",
        r"\b(calculus|derivatives?|integrals?|limits?|differentiation|integration|rate of change|optimization)\b",
        (
            "Calculus is really the study of change: derivatives describe how fast something moves, integrals add up what it leaves behind.",
            "Limits can feel abstract, but they are just a careful way of asking what a value is heading toward.",
            "Many optimization problems come down to finding where the slope flattens out to zero.",
        ),
        confidence=SUBTOPIC_CONFIDENCE,
        parent="mathematics",
    ),
    TopicRule(
        "physics",
        r"\b(physics|gravity|quantum|relativity|energy|momentum|velocity|acceleration|forces?|particles?|"
        r"electricity|magnetism|thermodynamics|nuclear)\b",
        (
            "Physics is at its best when a simple principle, like conservation of energy, explains many different situations at once.",
            "Many physics questions get easier once you sketch the situation and list the forces acting on each part.",
            "The strange corners of physics, like quantum behaviour, still rest on careful measurement and testable predictions.",
            "Units are a quiet ally in physics: if they do not work out, the equation probably does not either.",
        ),
    ),
    TopicRule(
        "chemistry",
        r"\b(chemistry|chemicals?|molecules?|atoms?|reactions?|elements?|compounds?|acids?|bonds?|periodic table|electrons?)\b",
        (
            "Chemistry is largely the story of electrons: where they sit and where they would rather be.",
            "Balancing a reaction is a reminder that matter is rearranged rather than created or destroyed.",
            "Periodic trends make much more sense once you picture how tightly each atom holds its outer electrons.",
            "A lot of everyday chemistry happens in the kitchen, from browning onions to bread rising.",
        ),
    ),
    TopicRule(
        "biology",
        r"\b(biology|cells?|dna|rna|genes?|genetic|proteins?|evolution|organisms?|species|photosynthesis|natural selection)\b",
        (
            "Biology links tiny molecular details to whole living systems, which is part of what makes it so rich.",
            "Evolution is a helpful lens: many biological features make sense once you ask what problem they solved.",
            "Cells are remarkably busy places, constantly building, repairing and signalling.",
            "It is striking how much of life runs on the same basic genetic code, from bacteria to people.",
        ),
    ),
    TopicRule(
        "environment",
        r"\b(environment|environmental|ecosystems?|climate|pollution|sustainability|sustainable|biodiversity|conservation|"
        r"habitats?|renewable|fossil fuels?|carbon|global warming|recycling)\b",
        (
            "Environmental questions usually connect many systems at once: weather, economies, habits and ecosystems.",
            "Small local actions feel modest, but conservation often succeeds through many of them adding up.",
            "Renewable energy has moved quickly from niche to mainstream, which shows how fast infrastructure can shift.",
            "Ecosystems are resilient up to a point, and a lot of environmental science is about finding where that point lies.",
        ),
    ),
    TopicRule(
        "history",
        r"\b(history|historical|ancient|medieval|renaissance|revolutions?|civilizations?|empires?|dynasty|dynasties|"
        r"century|centuries|wars?)\b",
        (
            "History gets more vivid when you ask what ordinary people at the time knew and feared.",
            "Most historical turning points have several causes that built up long before the event itself.",
            "Reading more than one account of the same period is a helpful way to see how perspective shapes the story.",
            "Primary sources, like letters and diaries, often reveal details that textbooks smooth over.",
        ),
    ),
    TopicRule(
        "ancient_history",
        r"\b(ancient|rome|roman|romans|greece|greek|greeks|egypt|egyptian|mesopotamia|babylon|pharaohs?|pyramids?|classical)\b",
        (
            "Ancient civilizations solved engineering problems with remarkably simple tools and a great deal of organisation.",
            "Much of what we know about the ancient world comes from fragments, so historians work a bit like detectives.",
            "Ideas from ancient Greece and Rome still echo in modern law, architecture and language.",
        ),
        confidence=SUBTOPIC_CONFIDENCE,
        parent="history",
    ),
    TopicRule(
        "modern_history",
        r"\b(modern|world wars?|industrial revolution|cold war|20th century|twentieth century|contemporary)\b",
        (
            "Modern history is close enough that its effects are still visible in borders, institutions and family stories.",
            "The industrial revolution changed not only how things were made but how people lived, worked and kept time.",
            "Periods like the Cold War are easier to follow once you track what each side believed the other wanted.",
        ),
        confidence=SUBTOPIC_CONFIDENCE,
        parent="history",
    ),
    TopicRule(
        "geography",
        r"\b(geography|maps?|continents?|countries|country|mountains?|rivers?|oceans?|landforms?|population|urban|rural)\b",
        (
            "Geography explains a lot of history: rivers, mountains and coastlines shaped where people settled and traded.",
            "Maps are always choices about what to show and what to leave out.",
            "Population patterns often follow water, climate and transport routes more than borders.",
            "Looking at a place at several scales, from street to region, tends to reveal things a single view misses.",
        ),
    ),
    TopicRule(
        "civics",
        r"\b(government|civic|civics|citizens?|citizenship|democracy|republic|constitution|elections?|vote|voting|"
        r"legislature|parliament|congress|supreme court)\b",
        (
            "Civics is really about how a community makes decisions together and who gets a say.",
            "Constitutions set the rules of the game, but much of government depends on habits and norms as well.",
            "Local government often affects daily life more directly than national politics does.",
            "Understanding how a bill becomes law makes the news a lot easier to follow.",
        ),
    ),
    TopicRule(
        "philosophy",
        r"\b(philosophy|philosophical|philosophers?|ethics|epistemology|metaphysics|logic|existence|existential|"
        r"consciousness|meaning of life|free will|wisdom)\b",
        (
            "Philosophy often starts by questioning something that seems obvious and following where that leads.",
            "Ethical questions rarely have tidy answers, but clarifying what you value makes them easier to reason about.",
            "Big questions about meaning tend to be more approachable when you connect them to concrete choices.",
            "A helpful philosophical habit is to state the strongest version of a view you disagree with.",
        ),
    ),
    TopicRule(
        "ethics_religion",
        r"\b(moral|morals|morality|virtues?|justice|fairness|religion|religious|spiritual|spirituality|faith|beliefs?|"
        r"divine|sacred|prayer)\b",
        (
            "Questions of right and wrong are often less about rules and more about which values we weigh most heavily.",
            "Many religious and spiritual traditions share surprisingly similar ideas about compassion and humility.",
            "Fairness can mean equal treatment or treatment according to need, and a lot of disagreement comes from that gap.",
            "Reflecting on where your own beliefs came from can make conversations with others more open.",
        ),
    ),
    TopicRule(
        "programming",
        r"\b(computers?|software|hardware|code|coding|programs?|programming|programmer|developers?|algorithms?|apps?|"
        r"websites?|tech|technology|ai|artificial intelligence|python|javascript|java|bugs?|debug|debugging|databases?|"
        r"machine learning|data science|cybersecurity)\b",
        (
            "With code, a small reproducible example usually reveals the problem faster than staring at the whole program.",
            "Reading the error message slowly, line by line, is one of the most underrated debugging skills.",
            "Good software tends to grow from small pieces that each do one thing well.",
            "Technology changes quickly, but the underlying ideas, like breaking problems into steps, last much longer.",
        ),
    ),
    TopicRule(
        "programming_languages",
        r"\b(python|javascript|typescript|java|rust|ruby|php|golang|syntax|compiler|programming languages?)\b|\bc\+\+",
        (
            "Every programming language makes trade-offs between speed, safety and how quickly you can write it.",
            "Once you know one language well, the second one comes much faster, because the core ideas carry over.",
            "Syntax errors are frustrating but honest: the computer is pointing right at the line it could not read.",
        ),
        confidence=SUBTOPIC_CONFIDENCE,
        parent="programming",
    ),
    TopicRule(
        "data_science",
        r"\b(data science|data scientists?|statistics|machine learning|deep learning|neural networks?|datasets?|"
        r"regression|visualization|predictive|pandas)\b",
        (
            "In data science, understanding where the data came from matters as much as the model you fit to it.",
            "A simple chart made early on often reveals problems that no amount of modelling would fix.",
            "Machine learning models are only as fair and accurate as the examples they learned from.",
        ),
        confidence=SUBTOPIC_CONFIDENCE,
        parent="programming",
    ),
    TopicRule(
        "cybersecurity",
        r"\b(cybersecurity|security|hacking|hackers?|firewalls?|malware|virus|encryption|passwords?|authentication|"
        r"vulnerability|vulnerabilities|phishing|privacy)\b",
        (
            "Most security problems start with people rather than code, which is why phishing works so often.",
            "A password manager and two-factor authentication remove a surprising amount of everyday risk.",
            "Security is about layers: no single defence has to be perfect if several overlap.",
        ),
        confidence=SUBTOPIC_CONFIDENCE,
        parent="programming",
    ),
    TopicRule(
        "blockchain",
        r"\b(blockchain|cryptocurrency|cryptocurrencies|crypto|bitcoin|ethereum|nfts?|smart contracts?|web3|decentralized|wallets?)\b",
        (
            "A blockchain is, at heart, a shared ledger that many parties can check without trusting a single keeper.",
            "Crypto markets move fast, so it helps to separate the technology itself from the speculation around it.",
            "Smart contracts are just programs, which means they can have bugs like any other code.",
            "Decentralisation solves some trust problems and introduces others, like who fixes mistakes.",
        ),
    ),
    TopicRule(
        "ar_vr",
        r"\b(augmented reality|virtual reality|mixed reality|vr|metaverse|immersive|headsets?|oculus)\b",
        (
            "Virtual reality works best when it gives you something a flat screen cannot, like a true sense of scale.",
            "Augmented reality is at its most useful when it overlays information exactly where you need it.",
            "Comfort is still one of the biggest design challenges for immersive experiences.",
            "Simulation in VR is already helping with training in fields like surgery and aviation.",
        ),
    ),
    TopicRule(
        "economics",
        r"\b(economics|economy|economic|markets?|inflation|recession|gdp|supply and demand|finance|financial|money|"
        r"budget|investments?|investing|trade|stocks?|interest rates?)\b",
        (
            "Economics is largely about trade-offs: every choice has a cost in what you give up.",
            "Money decisions feel lighter once you separate what is urgent from what can wait.",
            "Markets respond to expectations as much as to facts, which is why they can move so quickly.",
            "Inflation is easiest to understand as money slowly buying a little less each year.",
        ),
    ),
    TopicRule(
        "psychology",
        r"\b(psychology|psychologists?|behavior|behaviour|mind|cognitive|therapy|therapist|habits?|motivation|"
        r"personality|perception|subconscious)\b",
        (
            "Psychology reminds us that habits are built from small cues and rewards, so small changes add up.",
            "Our minds take shortcuts constantly, which is useful most of the time and misleading some of the time.",
            "Motivation often follows action rather than the other way around.",
            "Noticing a thought without immediately believing it is a skill that gets easier with practice.",
        ),
    ),
    TopicRule(
        "sociology",
        r"\b(sociology|society|societies|social|community|communities|institutions?|inequality|social class|norms)\b",
        (
            "Sociology looks at the patterns that appear when many individual choices add up.",
            "Social norms are powerful precisely because we rarely notice them until someone breaks one.",
            "Communities tend to be strongest where people have regular, low-stakes chances to meet.",
            "Institutions like schools and workplaces shape behaviour in ways their designers did not always intend.",
        ),
    ),
    TopicRule(
        "anthropology",
        r"\b(anthropology|culture|cultures|cultural|ethnic|indigenous|tribes?|rituals?|archaeology|customs|traditions?|human evolution)\b",
        (
            "Anthropology invites us to see our own everyday customs as just as curious as anyone else's.",
            "Rituals often carry meaning that is hard to explain in words but easy to feel when you take part.",
            "Archaeology reconstructs whole ways of life from what people left behind, sometimes just a few objects.",
            "Traditions change more than we tend to think, even when they feel timeless.",
        ),
    ),
    TopicRule(
        "political_science",
        r"\b(politics|political|political science|polic(y|ies)|diplomacy|international relations|sovereignty|regimes?|geopolitics)\b",
        (
            "Political science asks not only who holds power but how that power is checked.",
            "Diplomacy often works slowly and quietly, which is why its successes rarely make headlines.",
            "Policies usually involve trade-offs between groups, so it helps to ask who gains and who pays.",
            "Comparing how different countries handle the same problem is one of the clearest ways to see political choices.",
        ),
    ),
    TopicRule(
        "arts",
        r"\b(art|arts|artists?|paintings?|drawing|drawings|sketch|sketching|sculpture|design|museums?|gallery|galleries|"
        r"creative|illustration)\b",
        (
            "Creative work often improves most when you let yourself make a rough version first.",
            "Art has a way of saying things that are hard to put into plain words.",
            "Studying work you admire closely is one of the best ways to grow your own style.",
            "Limits, like a small palette or a single colour, can make creative choices clearer.",
        ),
    ),
    TopicRule(
        "music",
        r"\b(music|songs?|melody|melodies|harmony|rhythm|instruments?|composers?|musicians?|band|orchestra|concerts?|"
        r"chords?|piano|guitar|drums|singing)\b",
        (
            "Music practice tends to pay off most in short, focused sessions rather than long, tired ones.",
            "A lot of songs you know share the same handful of chords, which is encouraging when you are learning.",
            "Listening closely to one instrument at a time can make a familiar song feel new.",
            "Rhythm is often the part beginners skip and the part that makes everything else sound right.",
        ),
    ),
    TopicRule(
        "creative_writing",
        r"\b(writing|writers?|authors?|novels?|story|stories|poems?|poetry|fiction|plot|narrative|literature|prose|screenplay)\b",
        (
            "A first draft only needs to exist; shaping it comes later.",
            "Strong characters usually want something specific, and the story comes from what stands in their way.",
            "Reading your writing aloud is one of the fastest ways to hear where the rhythm stumbles.",
            "Poetry often works by noticing one small, concrete detail and letting it carry a larger feeling.",
        ),
    ),
    TopicRule(
        "performing_arts",
        r"\b(theater|theatre|drama|dance|dancing|ballet|choreography|actors?|actress|acting|stage|rehearsals?|musical)\b",
        (
            "Performing is a strange mix of precise preparation and staying open to what happens in the moment.",
            "Nerves before going on stage are normal; many performers learn to read them as energy rather than danger.",
            "Rehearsal is where most of the real creative work happens, long before an audience arrives.",
            "Dance and theatre both rely on timing, which is why small pauses can carry so much meaning.",
        ),
    ),
    TopicRule(
        "film_media",
        r"\b(films?|movies?|cinema|director|documentary|documentaries|animation|tv|television|series|media|broadcast|streaming)\b",
        (
            "Film tells stories through framing and editing as much as through dialogue.",
            "Watching a favourite scene with the sound off shows how much the camera is doing.",
            "Documentaries are shaped by choices about what to include, just as fiction is.",
            "Media habits are worth noticing, since what we watch tends to shape what we expect from the world.",
        ),
    ),
    TopicRule(
        "sports",
        r"\b(sports?|athletes?|teams?|tournaments?|championships?|coach|league|match|game|games|fitness|training|"
        r"workouts?|running|football|soccer|basketball|baseball|tennis|nba)\b",
        (
            "In sport, consistency over weeks usually beats intensity over a single day.",
            "Recovery is part of training, not a break from it.",
            "Watching how experienced players move is a helpful way to pick up small technical details.",
            "Team sports reward communication almost as much as individual skill.",
        ),
    ),
    TopicRule(
        "football_soccer",
        r"\b(football|soccer|goals?|strikers?|defenders?|midfielders?|goalkeepers?|penalty|penalties|premier league|world cup|offside)\b",
        (
            "Football is often decided by movement off the ball, which is easy to miss on television.",
            "A lot of a side's strength comes from how compact it stays when it loses possession.",
            "Set pieces are one of the few moments in football that can be rehearsed almost exactly.",
        ),
        confidence=SUBTOPIC_CONFIDENCE,
        parent="sports",
    ),
    TopicRule(
        "basketball",
        r"\b(basketball|hoops?|dribble|dribbling|rebounds?|dunks?|point guard|nba|three-pointers?)\b",
        (
            "Basketball rewards footwork as much as shooting; balance makes every shot more repeatable.",
            "Rebounding is often about positioning and effort more than height.",
            "The modern game leans heavily on spacing, which opens lanes for drives and passes.",
        ),
        confidence=SUBTOPIC_CONFIDENCE,
        parent="sports",
    ),
    TopicRule(
        "tennis",
        r"\b(tennis|rackets?|racquets?|serve|serves|volley|backhand|forehand|deuce|grand slam|wimbledon|baseline)\b",
        (
            "In tennis, a reliable second serve often matters more than a fast first one.",
            "Footwork sets up every stroke, so many coaches start there before touching technique.",
            "Tennis is as much a mental game as a physical one, especially in long, close sets.",
        ),
        confidence=SUBTOPIC_CONFIDENCE,
        parent="sports",
    ),
    TopicRule(
        "yoga_mindfulness",
        r"\b(yoga|meditation|meditate|meditating|mindfulness|mindful|breathing|breathwork|asanas?|relaxation)\b",
        (
            "Even a few slow breaths can shift how the body feels, which makes breathing a handy tool to keep close.",
            "Mindfulness is less about emptying the mind and more about noticing where it wanders.",
            "Short, regular practice tends to do more than an occasional long session.",
            "Yoga poses are meant to be adapted; the right version is the one that suits your body today.",
        ),
    ),
    TopicRule(
        "relationships",
        r"\b(relationships?|friends?|friendship|partner|family|parents?|dating|breakup|marriage|divorce|boyfriend|"
        r"girlfriend|spouse|siblings?)\b",
        (
            "Relationships tend to go better when both people feel heard before problems get solved.",
            "It can help to describe how a situation affected you rather than what the other person did wrong.",
            "Strong connections are usually built from many small moments of attention.",
            "Boundaries are not walls; they are information about what helps a relationship work for you.",
        ),
    ),
    TopicRule(
        "education",
        r"\b(school|study|studying|exams?|homework|class|university|college|learning|teachers?|course|students?|"
        r"professors?|curriculum|degree|diploma|academic)\b",
        (
            "Spacing out study sessions and testing yourself tends to stick far better than rereading notes.",
            "Explaining a topic out loud, even to an empty room, quickly shows where the gaps are.",
            "Learning feels slow in the middle, but the progress usually becomes visible later.",
            "Asking questions in class feels exposed, yet it is one of the quickest ways to learn.",
        ),
    ),
    TopicRule(
        "health",
        r"\b(health|healthy|sick|ill|illness|sleep|diet|exercise|doctor|hospital|pain|headache|tired|symptoms?|"
        r"disease|medication|medicine|treatment|diagnosis|injury)\b",
        (
            "Rest, water and a bit of movement do more for how we feel than we often give them credit for.",
            "When your body or mind feels run down, lowering the bar for the day is a reasonable choice.",
            "If something about your health keeps worrying you, a conversation with a professional can bring real peace of mind.",
            "Recovery rarely follows a straight line, so a slower day is not a sign of going backwards.",
        ),
    ),
    TopicRule(
        "work",
        r"\b(work|job|career|boss|coworkers?|colleagues?|office|project|deadline|meeting|interview|business|company|"
        r"employer|employment|resume|workplace|promotion|salary)\b",
        (
            "Work stress often eases a little once the next concrete step is written down.",
            "A heavy workload is easier to face when it is split into pieces you can finish.",
            "Setting clear expectations early tends to prevent a lot of friction later on.",
            "Careers are rarely straight lines, and sideways moves often teach the most.",
        ),
    ),
    TopicRule(
        "emotions",
        r"\b(feel|feeling|feelings|emotions?|mood|stressed|anxious|sad|happy|angry|lonely|overwhelmed|worry|worried|"
        r"fear|joy|frustrated|depressed)\b",
        (
            "Feelings carry useful information, even the uncomfortable ones.",
            "Naming an emotion precisely can take some of its weight away.",
            "It's okay for moods to shift through the day; they are signals, not verdicts.",
            "Strong feelings usually pass more quickly when they are allowed rather than fought.",
        ),
    ),
)

GENERAL_PARAGRAPHS = (
    "Every question is a chance to look at something from a slightly different angle.",
    "Sometimes the most useful thing is simply to think out loud with someone.",
    "There's usually more than one reasonable way to approach a situation like this.",
    "Taking a moment to put thoughts into words is already a helpful step.",
)

TOPIC_TRANSITIONS = (
    "On that note,",
    "Related to that,",
    "Along the same lines,",
    "Building on that,",
    "Another thought:",
)


@dataclass(frozen=True)
class FallbackPhrases:
    greetings: tuple[str, ...] = GREETINGS
    help_offers: tuple[str, ...] = HELP_OFFERS
    how_are_you_reply: str = HOW_ARE_YOU_REPLY
    positive_acknowledgments: tuple[str, ...] = POSITIVE_ACKNOWLEDGMENTS
    negative_acknowledgments: tuple[str, ...] = NEGATIVE_ACKNOWLEDGMENTS
    neutral_acknowledgments: tuple[str, ...] = NEUTRAL_ACKNOWLEDGMENTS
    confusion_elaborations: tuple[str, ...] = CONFUSION_ELABORATIONS
    interest_elaborations: tuple[str, ...] = INTEREST_ELABORATIONS
    continuation_prompts: tuple[str, ...] = CONTINUATION_PROMPTS
    topics: tuple[TopicRule, ...] = TOPIC_RULES
    general_paragraphs: tuple[str, ...] = GENERAL_PARAGRAPHS
    topic_transitions: tuple[str, ...] = TOPIC_TRANSITIONS

    def topic(self, name: str) -> TopicRule | None:
        for rule in self.topics:
            if rule.name == name:
                return rule
        return None


DEFAULT_PHRASES = FallbackPhrases()

_POOL_FIELDS = (
    "greetings",
    "help_offers",
    "positive_acknowledgments",
    "negative_acknowledgments",
    "neutral_acknowledgments",
    "confusion_elaborations",
    "interest_elaborations",
    "continuation_prompts",
    "general_paragraphs",
    "topic_transitions",
)


def _as_strings(raw: Any) -> tuple[str, ...]:
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, (list, tuple)):
        return ()
    return tuple(str(item).strip() for item in raw if str(item).strip())


def keywords_pattern(keywords: Any) -> str:
    """Word-boundary alternation over literal keywords, longest first."""
    words = sorted(set(_as_strings(keywords)), key=len, reverse=True)
    if not words:
        return ""
    return r"\b(" + "|".join(re.escape(word) for word in words) + r")\b"


def _merge_topic(name: str, raw: Mapping[str, Any], existing: TopicRule | None, known: Mapping[str, TopicRule]) -> TopicRule | None:
    pattern = str(raw.get("pattern") or keywords_pattern(raw.get("keywords")) or (existing.pattern if existing else ""))
    paragraphs = _as_strings(raw.get("paragraphs")) or (existing.paragraphs if existing else ())
    if not pattern or not paragraphs:
        logger.warning(f"Skipping topic without keywords or paragraphs: {name!r}")
        return None

    parent = raw.get("parent", existing.parent if existing else None)
    if parent is not None:
        parent = str(parent)
        if parent not in known or known[parent].parent is not None:
            logger.warning(f"Skipping topic {name!r} with unknown parent {parent!r}")
            return None

    try:
        default_confidence = existing.confidence if existing else (SUBTOPIC_CONFIDENCE if parent else 0.9)
        confidence = float(raw.get("confidence", default_confidence))
    except (TypeError, ValueError):
        logger.warning(f"Skipping topic with invalid confidence: {name!r}")
        return None

    try:
        return TopicRule(name, pattern, paragraphs, confidence=confidence, parent=parent)
    except re.error as error:
        logger.warning(f"Skipping topic {name!r} with invalid pattern: {error}")
        return None


def merge_fallback_phrases(base: FallbackPhrases, payload: Mapping[str, Any]) -> FallbackPhrases:
    """Overlay a phrase payload (as read from YAML/JSON) onto ``base``.

    Phrase pools given in the payload replace the built-in pool. Topics are
    keyed by name: known topics are updated in place, new ones are appended.
    A topic needs either a ``pattern`` regex or a ``keywords`` list.
    """
    updates: dict[str, Any] = {}
    for pool_name in _POOL_FIELDS:
        if pool_name not in payload:
            continue
        values = _as_strings(payload.get(pool_name))
        if not values:
            logger.warning(f"Skipping empty phrase pool: {pool_name}")
            continue
        updates[pool_name] = values

    reply = str(payload.get("how_are_you_reply") or "").strip()
    if reply:
        updates["how_are_you_reply"] = reply

    raw_topics = payload.get("topics") or {}
    if not isinstance(raw_topics, Mapping):
        logger.warning("Skipping topics section that is not a mapping")
        raw_topics = {}

    topics = {topic.name: topic for topic in base.topics}
    for name, raw in raw_topics.items():
        name = str(name)
        if not isinstance(raw, Mapping):
            logger.warning(f"Skipping malformed topic: {name!r}")
            continue
        merged = _merge_topic(name, raw, topics.get(name), topics)
        if merged is not None:
            topics[name] = merged
    updates["topics"] = tuple(topics.values())

    return replace(base, **updates)


def load_fallback_phrases(path: str | Path | None = None) -> FallbackPhrases:
    """Build the phrase tables, overlaying a YAML or JSON file when given."""
    if not path:
        return DEFAULT_PHRASES
    payload = read_rule_file(path, logger, "Fallback phrases")
    if payload is None:
        return DEFAULT_PHRASES
    return merge_fallback_phrases(DEFAULT_PHRASES, payload)


__all__ = [
    "DEFAULT_PHRASES",
    "FallbackPhrases",
    "TOPIC_RULES",
    "TopicRule",
    "keywords_pattern",
    "load_fallback_phrases",
    "merge_fallback_phrases",
]
