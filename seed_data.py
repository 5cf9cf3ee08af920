"""
seed_data.py - Initial Desktop Contents
Sample case, notes folder and one sample file per supported format.
"""

from config import SUPPORTED_EXTENSIONS, INITIAL_SCENARIO
from item_store import ItemStore, Item, ItemType, CaseData, Position
from utils import now_ms

EXAMPLES_FOLDER_ID = 'examples-folder'

MEETING_MINUTES = (
    "Meeting Minutes - Oct 24\n\n"
    "Attendees: John, Jane, Bob\n\n"
    "Topics:\n- Case strategy\n- Evidence collection\n- Timeline review\n\n"
    "Action items:\n- Bob to review contracts\n- Jane to contact witness"
)


def seed_desktop(store: ItemStore, columns: int = 6):
    created = now_ms()
    entries = [
        (Item(id='1', parent_id=None, name='Project Alpha Case', type=ItemType.SMART_FOLDER,
              position=Position(50, 50), created_at=created),
         CaseData(id='1', scenario=INITIAL_SCENARIO, confidence_score=65)),
        (Item(id='2', parent_id=None, name='Personal Notes', type=ItemType.FOLDER,
              position=Position(180, 50), created_at=created), None),
        (Item(id='3', parent_id='2', name='Meeting Minutes', type=ItemType.NOTE,
              position=Position(50, 50), created_at=created, content=MEETING_MINUTES,
              color='#fef08a'), None),
        (Item(id=EXAMPLES_FOLDER_ID, parent_id=None, name='Supported Formats', type=ItemType.FOLDER,
              position=Position(310, 50), created_at=created), None),
    ]

    for index, ext in enumerate(SUPPORTED_EXTENSIONS):
        col = index % columns
        row = index // columns
        entries.append((Item(
            id=f"example-{ext}-{index}",
            parent_id=EXAMPLES_FOLDER_ID,
            name=f"Sample File.{ext.lower()}",
            type=ItemType.FILE,
            position=Position(50 + col * 120, 50 + row * 120),
            created_at=created,
            content=f"This is a sample content for {ext} file type.",
            size='15 KB',
            mime_type='application/octet-stream',
        ), None))

    store.create_many(entries)
