"""
Statutory Heir Determination.

Implements the Civil Code rules that decide who inherits and in what share:
- Spouse is always an heir (民法890条)
- First rank: children, including adopted children (民法887条)
- Second rank: lineal ascendants, only without children (民法889条1項1号)
- Third rank: siblings, only without children or ascendants (民法889条1項2号)
- Half-blood siblings take half a full sibling's share (民法900条4号)

Statutory shares of the spouse (民法900条):
- with children:  1/2
- with parents:   2/3
- with siblings:  3/4
- alone:          1

Legatees outside the statutory order are appended as OTHER entries so the
division apportioner can tax them; they never receive a statutory share.
"""

from __future__ import annotations

from fractions import Fraction
from typing import List
import logging

from models.inheritance import FamilyStructure, Heir, HeirType, RelationshipType

logger = logging.getLogger(__name__)


# Display labels, numbered per category
SPOUSE_LABEL = "配偶者"
CHILD_LABEL = "子"
ADOPTED_CHILD_LABEL = "養子"
GRANDCHILD_ADOPTED_LABEL = "孫養子"
PARENT_LABEL = "親"
SIBLING_LABEL = "兄弟姉妹"
HALF_SIBLING_LABEL = "半血兄弟姉妹"
NON_HEIR_LABEL = "法定相続人以外"


class HeirDeterminator:
    """
    Turns a FamilyStructure into an ordered list of Heir records.

    Order is spouse, the applicable statutory rank, then non-heirs. The
    order is stable and becomes the display order downstream.
    """

    def determine(self, structure: FamilyStructure) -> List[Heir]:
        """
        Determine the statutory heirs and their shares.

        Args:
            structure: Family composition of the decedent

        Returns:
            Heirs in display order. The list holds no statutory heir when
            the structure names nobody in the statutory order; callers are
            expected to reject that through validation first.
        """
        heirs: List[Heir] = []

        has_children = structure.children_count > 0
        has_parents = structure.parents_alive > 0
        has_siblings = structure.siblings_count > 0 or structure.half_siblings_count > 0

        others_share = Fraction(1)
        if structure.spouse_exists:
            spouse_share = self._spouse_share(has_children, has_parents, has_siblings)
            others_share = 1 - spouse_share
            heirs.append(Heir(
                id="spouse",
                name=SPOUSE_LABEL,
                heir_type=HeirType.SPOUSE,
                relationship=RelationshipType.SPOUSE,
                inheritance_share=spouse_share,
                two_fold_addition=False,
            ))

        if has_children:
            heirs.extend(self._children(structure, others_share))
        elif has_parents:
            heirs.extend(self._parents(structure, others_share))
        elif has_siblings:
            heirs.extend(self._siblings(structure, others_share))

        heirs.extend(self._non_heirs(structure))

        logger.debug(
            "Determined %d heirs (%d statutory)",
            len(heirs),
            sum(1 for heir in heirs if heir.is_statutory),
        )
        return heirs

    @staticmethod
    def _spouse_share(has_children: bool, has_parents: bool, has_siblings: bool) -> Fraction:
        if has_children:
            return Fraction(1, 2)
        if has_parents:
            return Fraction(2, 3)
        if has_siblings:
            return Fraction(3, 4)
        return Fraction(1)

    @staticmethod
    def _children(structure: FamilyStructure, others_share: Fraction) -> List[Heir]:
        """
        First rank. Positions are filled grandchild-adopted first, then
        normally adopted, then biological children.
        """
        individual_share = others_share / structure.children_count
        children: List[Heir] = []
        for i in range(structure.children_count):
            is_adopted = i < structure.adopted_children_count
            is_grandchild_adopted = is_adopted and i < structure.grandchild_adopted_count

            if is_grandchild_adopted:
                name, relationship = f"{GRANDCHILD_ADOPTED_LABEL}{i + 1}", RelationshipType.GRANDCHILD_ADOPTED
            elif is_adopted:
                name, relationship = f"{ADOPTED_CHILD_LABEL}{i + 1}", RelationshipType.ADOPTED_CHILD
            else:
                name, relationship = f"{CHILD_LABEL}{i + 1}", RelationshipType.CHILD

            children.append(Heir(
                id=f"child_{i + 1}",
                name=name,
                heir_type=HeirType.CHILD,
                relationship=relationship,
                inheritance_share=individual_share,
                # A grandchild adopted by the decedent skips a generation
                two_fold_addition=is_grandchild_adopted,
                is_adopted=is_adopted,
            ))
        return children

    @staticmethod
    def _parents(structure: FamilyStructure, others_share: Fraction) -> List[Heir]:
        individual_share = others_share / structure.parents_alive
        return [
            Heir(
                id=f"parent_{i + 1}",
                name=f"{PARENT_LABEL}{i + 1}",
                heir_type=HeirType.PARENT,
                relationship=RelationshipType.PARENT,
                inheritance_share=individual_share,
                two_fold_addition=False,
            )
            for i in range(structure.parents_alive)
        ]

    @staticmethod
    def _siblings(structure: FamilyStructure, others_share: Fraction) -> List[Heir]:
        """Third rank. A half-blood sibling counts as half a unit."""
        total_units = structure.siblings_count + Fraction(structure.half_siblings_count, 2)
        full_share = others_share / total_units
        half_share = full_share / 2

        siblings = [
            Heir(
                id=f"sibling_{i + 1}",
                name=f"{SIBLING_LABEL}{i + 1}",
                heir_type=HeirType.SIBLING,
                relationship=RelationshipType.SIBLING,
                inheritance_share=full_share,
                two_fold_addition=True,
            )
            for i in range(structure.siblings_count)
        ]
        siblings.extend(
            Heir(
                id=f"half_sibling_{i + 1}",
                name=f"{HALF_SIBLING_LABEL}{i + 1}",
                heir_type=HeirType.SIBLING,
                relationship=RelationshipType.HALF_SIBLING,
                inheritance_share=half_share,
                two_fold_addition=True,
            )
            for i in range(structure.half_siblings_count)
        )
        return siblings

    @staticmethod
    def _non_heirs(structure: FamilyStructure) -> List[Heir]:
        return [
            Heir(
                id=f"non_heir_{i + 1}",
                name=f"{NON_HEIR_LABEL}{i + 1}",
                heir_type=HeirType.OTHER,
                relationship=RelationshipType.OTHER,
                inheritance_share=Fraction(0),
                two_fold_addition=True,
            )
            for i in range(max(0, structure.non_heirs_count))
        ]


def determine_legal_heirs(structure: FamilyStructure) -> List[Heir]:
    """Convenience wrapper around HeirDeterminator().determine()."""
    return HeirDeterminator().determine(structure)
