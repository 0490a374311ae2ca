"""Canonical record models shared across photo sources."""

from photoindex.models.photo import FlickrPhoto, InstagramPhoto, Photo, photo_class_for
from photoindex.models.profile import Profile, ProfileType, SourceType

__all__ = [
    "FlickrPhoto",
    "InstagramPhoto",
    "Photo",
    "Profile",
    "ProfileType",
    "SourceType",
    "photo_class_for",
]
