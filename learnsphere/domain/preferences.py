"""
Learner preference schemas and the fixed grade/interest catalogs.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class GradeLevel(str, Enum):
    GRADE_1 = "1"
    GRADE_2 = "2"
    GRADE_3 = "3"
    GRADE_4 = "4"
    GRADE_5 = "5"
    GRADE_6 = "6"
    GRADE_7 = "7"
    GRADE_8 = "8"
    GRADE_9 = "9"
    GRADE_10 = "10"
    GRADE_11 = "11"
    GRADE_12 = "12"
    UNDERGRAD = "undergrad"


class Interest(str, Enum):
    READING = "reading"
    SCIENCE = "science"
    ART = "art"
    WRITING = "writing"
    PHOTOGRAPHY = "photography"
    NATURE = "nature"
    SOCCER = "soccer"
    CYCLING = "cycling"
    COOKING = "cooking"
    GAMING = "gaming"
    BASKETBALL = "basketball"
    FOOTBALL = "football"
    TABLE_TENNIS = "table_tennis"
    TENNIS = "tennis"
    TECHNOLOGY = "technology"
    SKATEBOARDING = "skateboarding"


class LearningStyle(str, Enum):
    VISUAL = "visual"
    AUDITORY = "auditory"
    KINESTHETIC = "kinesthetic"
    READING = "reading"


ComplexityBucket = Literal["elementary", "middle", "high", "college"]
InterestCategory = Literal["academic", "sports", "creative", "technology", "lifestyle"]


class GradeLevelInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    grade: GradeLevel
    display_name: str
    description: str
    age_range: str
    complexity: ComplexityBucket
    order: int


class InterestInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    interest: Interest
    display_name: str
    description: str
    category: InterestCategory
    analogy_examples: tuple[str, ...]


class UserPreferences(BaseModel):
    """Immutable learner preferences for one generation run."""

    model_config = ConfigDict(frozen=True)

    grade_level: GradeLevel
    interest: Interest
    learning_styles: List[LearningStyle] = Field(default_factory=list)
    language: str = "en"

    @property
    def grade_info(self) -> GradeLevelInfo:
        return GRADE_LEVEL_INFO[self.grade_level]

    @property
    def interest_info(self) -> InterestInfo:
        return INTEREST_INFO[self.interest]

    @property
    def complexity(self) -> ComplexityBucket:
        return self.grade_info.complexity


def _grade(
    grade: GradeLevel,
    display_name: str,
    description: str,
    age_range: str,
    complexity: ComplexityBucket,
    order: int,
) -> GradeLevelInfo:
    return GradeLevelInfo(
        grade=grade,
        display_name=display_name,
        description=description,
        age_range=age_range,
        complexity=complexity,
        order=order,
    )


GRADE_LEVEL_INFO: dict[GradeLevel, GradeLevelInfo] = {
    GradeLevel.GRADE_1: _grade(GradeLevel.GRADE_1, "Grade 1", "First grade level with simple vocabulary", "6-7 years", "elementary", 1),
    GradeLevel.GRADE_2: _grade(GradeLevel.GRADE_2, "Grade 2", "Second grade level with basic concepts", "7-8 years", "elementary", 2),
    GradeLevel.GRADE_3: _grade(GradeLevel.GRADE_3, "Grade 3", "Third grade level with expanding vocabulary", "8-9 years", "elementary", 3),
    GradeLevel.GRADE_4: _grade(GradeLevel.GRADE_4, "Grade 4", "Fourth grade level with more complex ideas", "9-10 years", "elementary", 4),
    GradeLevel.GRADE_5: _grade(GradeLevel.GRADE_5, "Grade 5", "Fifth grade level with intermediate concepts", "10-11 years", "elementary", 5),
    GradeLevel.GRADE_6: _grade(GradeLevel.GRADE_6, "Grade 6", "Sixth grade level transitioning to middle school", "11-12 years", "middle", 6),
    GradeLevel.GRADE_7: _grade(GradeLevel.GRADE_7, "Grade 7", "Seventh grade level with abstract thinking", "12-13 years", "middle", 7),
    GradeLevel.GRADE_8: _grade(GradeLevel.GRADE_8, "Grade 8", "Eighth grade level preparing for high school", "13-14 years", "middle", 8),
    GradeLevel.GRADE_9: _grade(GradeLevel.GRADE_9, "Grade 9", "Freshman level with complex analysis", "14-15 years", "high", 9),
    GradeLevel.GRADE_10: _grade(GradeLevel.GRADE_10, "Grade 10", "Sophomore level with advanced concepts", "15-16 years", "high", 10),
    GradeLevel.GRADE_11: _grade(GradeLevel.GRADE_11, "Grade 11", "Junior level with specialized knowledge", "16-17 years", "high", 11),
    GradeLevel.GRADE_12: _grade(GradeLevel.GRADE_12, "Grade 12", "Senior level preparing for college", "17-18 years", "high", 12),
    GradeLevel.UNDERGRAD: _grade(GradeLevel.UNDERGRAD, "Undergraduate", "College level with academic depth", "18+ years", "college", 13),
}


def _interest(
    interest: Interest,
    display_name: str,
    description: str,
    category: InterestCategory,
    *analogies: str,
) -> InterestInfo:
    return InterestInfo(
        interest=interest,
        display_name=display_name,
        description=description,
        category=category,
        analogy_examples=tuple(analogies),
    )


INTEREST_INFO: dict[Interest, InterestInfo] = {
    Interest.READING: _interest(
        Interest.READING, "Reading", "Books, literature, and storytelling", "academic",
        "like chapters in a book", "similar to plot development", "as in a story narrative",
    ),
    Interest.SCIENCE: _interest(
        Interest.SCIENCE, "Science", "Scientific discovery and experimentation", "academic",
        "like a scientific experiment", "similar to laboratory research", "as in hypothesis testing",
    ),
    Interest.ART: _interest(
        Interest.ART, "Art", "Visual arts, creativity, and design", "creative",
        "like painting a masterpiece", "similar to artistic composition", "as in creative expression",
    ),
    Interest.WRITING: _interest(
        Interest.WRITING, "Writing", "Creative writing and communication", "creative",
        "like writing a story", "similar to crafting sentences", "as in editing a draft",
    ),
    Interest.PHOTOGRAPHY: _interest(
        Interest.PHOTOGRAPHY, "Photography", "Capturing moments and visual storytelling", "creative",
        "like framing a perfect shot", "similar to adjusting camera settings", "as in capturing the moment",
    ),
    Interest.NATURE: _interest(
        Interest.NATURE, "Nature", "Outdoor exploration and environmental awareness", "lifestyle",
        "like exploring a forest", "similar to observing wildlife", "as in ecosystem balance",
    ),
    Interest.SOCCER: _interest(
        Interest.SOCCER, "Soccer", "Football/soccer strategy and teamwork", "sports",
        "like scoring a goal", "similar to team coordination", "as in strategic positioning",
    ),
    Interest.CYCLING: _interest(
        Interest.CYCLING, "Cycling", "Bicycle riding and endurance sports", "sports",
        "like pedaling uphill", "similar to maintaining momentum", "as in finding the right gear",
    ),
    Interest.COOKING: _interest(
        Interest.COOKING, "Cooking", "Culinary arts and food preparation", "lifestyle",
        "like following a recipe", "similar to mixing ingredients", "as in timing the cooking process",
    ),
    Interest.GAMING: _interest(
        Interest.GAMING, "Gaming", "Video games and interactive entertainment", "technology",
        "like leveling up a character", "similar to completing a quest", "as in strategic gameplay",
    ),
    Interest.BASKETBALL: _interest(
        Interest.BASKETBALL, "Basketball", "Basketball strategy and teamwork", "sports",
        "like shooting a three-pointer", "similar to team plays", "as in defensive strategy",
    ),
    Interest.FOOTBALL: _interest(
        Interest.FOOTBALL, "Football", "American football strategy and tactics", "sports",
        "like executing a play", "similar to quarterback strategy", "as in touchdown celebration",
    ),
    Interest.TABLE_TENNIS: _interest(
        Interest.TABLE_TENNIS, "Table Tennis", "Ping pong skill and precision", "sports",
        "like a perfect serve", "similar to quick reflexes", "as in precise paddle control",
    ),
    Interest.TENNIS: _interest(
        Interest.TENNIS, "Tennis", "Tennis technique and competition", "sports",
        "like an ace serve", "similar to baseline strategy", "as in match point pressure",
    ),
    Interest.TECHNOLOGY: _interest(
        Interest.TECHNOLOGY, "Technology", "Digital innovation and computing", "technology",
        "like programming code", "similar to software algorithms", "as in system optimization",
    ),
    Interest.SKATEBOARDING: _interest(
        Interest.SKATEBOARDING, "Skateboarding", "Skateboarding tricks and culture", "sports",
        "like landing a trick", "similar to finding balance", "as in mastering the board",
    ),
}


def get_grade_info(grade: GradeLevel | str) -> GradeLevelInfo:
    return GRADE_LEVEL_INFO[GradeLevel(grade)]


def get_interest_info(interest: Interest | str) -> InterestInfo:
    return INTEREST_INFO[Interest(interest)]


def grade_order(grade: Optional[GradeLevel | str]) -> int:
    if grade is None:
        return 0
    return get_grade_info(grade).order
