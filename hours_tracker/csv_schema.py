"""
Central schema of the sectioned text export.

The export is a sequence of bracketed sections, each followed by a column
line and comma-separated data lines:

    [ACTIVITIES]
    id,name,description,color,isActive
    act_1,Newsletter,Mailchimp & Content,#3b82f6,true

This module is the single source of truth for section names, column order
and the escaping rules shared by the exporter and the importer.
"""

from typing import Dict, List


class CSVSchema:
    """
    Section layout of the text export.

    Free-text fields cannot contain the delimiter, so commas are written as
    ";" and newlines as a space. Importing turns every ";" back into ",".
    Tags are joined with "|".

    The format is lossy in a few known ways:
    - a literal ";" in the original text comes back as ","
    - newlines come back as spaces
    - a tag containing "|" comes back as several tags
    - each line is stripped on import, so leading whitespace of the first
      field and trailing whitespace of the last field are lost
    """

    META = 'META'
    ACTIVITIES = 'ACTIVITIES'
    OBJECTIVES = 'OBJECTIVES'
    OBJECTIVES_MONTHLY = 'OBJECTIVES_MONTHLY'
    NEWS = 'NEWS'
    HOURS = 'HOURS'

    # Sections in export order
    SECTIONS: List[str] = [META, ACTIVITIES, OBJECTIVES, OBJECTIVES_MONTHLY, NEWS, HOURS]

    COLUMNS: Dict[str, List[str]] = {
        META: ['year', 'userName', 'lastUpdated'],
        ACTIVITIES: ['id', 'name', 'description', 'color', 'isActive'],
        OBJECTIVES: ['id', 'description', 'target', 'status', 'deadline'],
        OBJECTIVES_MONTHLY: ['objectiveId', 'month', 'progress', 'note'],
        NEWS: ['id', 'date', 'text', 'tags'],
        HOURS: ['month', 'activityId', 'date', 'hours'],
    }

    # A line containing any of these is a column line, not data
    HEADER_MARKERS: List[str] = [
        'year,userName',
        'id,name,description',
        'id,description,target',
        'objectiveId,month',
        'id,date,text',
        'month,activityId',
    ]

    DELIMITER = ','
    ESCAPED_DELIMITER = ';'
    TAG_SEPARATOR = '|'

    @classmethod
    def header_line(cls, section: str) -> str:
        """Column line for a section, e.g. "id,date,text,tags"."""
        return cls.DELIMITER.join(cls.COLUMNS[section])

    @classmethod
    def section_line(cls, section: str) -> str:
        return f"[{section}]"

    @classmethod
    def parse_section_line(cls, line: str):
        """
        Section name of a "[NAME]" line.

        Returns:
            Section name (possibly unknown), or None if the line is not a section line
        """
        if line.startswith('[') and line.endswith(']'):
            return line[1:-1]
        return None

    @classmethod
    def is_header_line(cls, line: str) -> bool:
        return any(marker in line for marker in cls.HEADER_MARKERS)

    @classmethod
    def escape_text(cls, text: str) -> str:
        """Make free text safe for a single comma-separated field."""
        return (
            text.replace(cls.DELIMITER, cls.ESCAPED_DELIMITER)
            .replace('\r\n', ' ')
            .replace('\n', ' ')
            .replace('\r', ' ')
        )

    @classmethod
    def unescape_text(cls, text: str) -> str:
        return text.replace(cls.ESCAPED_DELIMITER, cls.DELIMITER)
