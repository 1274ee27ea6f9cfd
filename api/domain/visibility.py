# SPDX-License-Identifier: Apache-2.0

"""
Public visibility of a complaint.

Visibility is a two-variant state. The only transition is Private.publish();
a published complaint stays published.
"""

from dataclasses import dataclass
from typing import Union


class VisibilityError(ValueError):
    """Raised for a visibility change that the policy forbids."""


@dataclass(frozen=True)
class Public:
    is_public = True

    def publish(self) -> "Public":
        raise VisibilityError("Complaint is already public")

    def unpublish(self):
        raise VisibilityError("Published complaints cannot be made private again")


@dataclass(frozen=True)
class Private:
    is_public = False

    def publish(self) -> Public:
        return Public()

    def unpublish(self):
        raise VisibilityError("Complaint is not public")


Visibility = Union[Private, Public]


def visibility_of(is_public: bool) -> Visibility:
    """Map the stored flag onto its visibility state."""
    return Public() if is_public else Private()
