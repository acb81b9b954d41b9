"""Pydantic schemas for the channel manager API."""

from channel_manager.schemas.property import *
from channel_manager.schemas.booking import *
from channel_manager.schemas.analytics import *
