"""List the school's subjects and start a teachers.json from them.

Existing teacher names in teachers.json are kept; new subject codes are
added with an empty name to be filled in by hand.
"""

from untis_bot.auth import UntisClient
from untis_bot.cache import CacheStore
from untis_bot.config import get_settings
from untis_bot.errors import CacheError

settings = get_settings()
store = CacheStore(settings.cache_dir)

with UntisClient(settings).login() as session:
    subjects = session.get_subjects()

print(f"Total: {len(subjects)} subjects\n")
for subject in sorted(subjects, key=lambda s: s["name"]):
    print(f"  {subject['id']:>6}  {subject['name']:<10} {subject.get('longName', '')}")

try:
    teachers = store.load_teachers()
except CacheError:
    teachers = {}

added = 0
for subject in subjects:
    if subject["name"] not in teachers:
        teachers[subject["name"]] = ""
        added += 1

store.save_teachers(teachers)
print(f"\n{added} new subject code(s) added to {store.path('teachers.json')}")
