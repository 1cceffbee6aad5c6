from typing import List

from memograph.core.domain.note import Note, now_millis

# (id, title, content, age in milliseconds)
DEMO_NOTES = [
    # Technology & Programming (6 notes)
    ('demo-1', 'React Hooks Study',
     'useEffect runs after render. Dependency array controls when it re-runs. Empty array = mount only. No array = every render. useMemo caches values, useCallback caches functions.',
     10000000),
    ('demo-5', 'TypeScript Generics',
     'Generics allow reusable components. const identity = <T>(arg: T): T => arg. Used often in API response types.',
     12000000),
    ('demo-7', 'Git Commands',
     'git rebase -i HEAD~3 (interactive rebase). git stash apply. git cherry-pick <commit>. git reset --soft HEAD~1 (undo commit keep changes).',
     15000000),
    ('demo-8', 'Docker Basics',
     'docker-compose up -d starts containers in detached mode. Use volumes for persistence. docker exec -it <container> bash for shell access. Always use .dockerignore.',
     9000000),
    ('demo-9', 'API Design Best Practices',
     'Use RESTful conventions: GET for read, POST for create, PUT/PATCH for update, DELETE for remove. Version your API (/v1/). Always paginate list endpoints. Return proper status codes.',
     11000000),
    ('demo-10', 'Python Async/Await',
     'async def declares coroutine. await pauses execution until promise resolves. asyncio.gather() runs multiple coroutines concurrently. Use for I/O-bound operations.',
     13000000),
    # Food & Cooking (6 notes)
    ('demo-2', 'Grocery List',
     'Buy: Milk, Eggs, Sourdough bread, Avocados, Hot sauce, Coffee beans (light roast).',
     5000000),
    ('demo-11', 'Perfect Scrambled Eggs Recipe',
     'Whisk 3 eggs with splash of milk. Low heat, constant stirring. Add butter. Remove from heat when slightly runny - they continue cooking. Salt at the end.',
     6000000),
    ('demo-12', 'Meal Prep Ideas',
     'Sunday prep: Chicken breast batch cook, rice portions, roasted veggies (broccoli, carrots, bell peppers). Overnight oats for breakfast. Keeps 4-5 days.',
     3000000),
    ('demo-13', 'Homemade Pizza Dough',
     '500g flour, 325ml warm water, 7g yeast, 10g salt, 15ml olive oil. Knead 10 min. Rise 2 hours. Makes 2 pizzas. Freeze extra dough.',
     7000000),
    ('demo-14', 'Coffee Brewing Notes',
     'Pour over ratio: 1:16 (15g coffee to 240ml water). Water temp 195-205°F. Bloom 30 sec. Total brew time 3-4 min. Grind size like sea salt.',
     4000000),
    ('demo-15', 'Restaurant Recommendations',
     'Try: Pasta Palace (amazing carbonara), Sushi Zen (omakase on Fridays), Taco Libre (al pastor tacos), Green Bowl (vegan poke).',
     2500000),
    # Entertainment & Media (6 notes)
    ('demo-6', 'Movie Watchlist',
     'To watch: Dune Part Two, Everything Everywhere All At Once, The Matrix (rewatch), Interstellar.',
     100000),
    ('demo-16', 'TV Shows Binge List',
     'Currently watching: The Bear S3, Shogun, True Detective S4. Queue: Severance, The Last of Us, Dark (German series).',
     150000),
    ('demo-17', 'Book Reading List',
     'Reading: Project Hail Mary by Andy Weir. Next up: Tomorrow and Tomorrow and Tomorrow, The Three-Body Problem, Atomic Habits.',
     8500000),
    ('demo-18', 'Podcast Subscriptions',
     'Favorites: Lex Fridman, Hardcore History, Syntax.fm (web dev), How I Built This, Darknet Diaries (cybersecurity stories).',
     9500000),
    ('demo-19', 'Video Game Backlog',
     "Playing: Baldur's Gate 3. Backlog: Elden Ring DLC, Hades 2, Hollow Knight, The Witness. Maybe finally finish Witcher 3.",
     200000),
    ('demo-20', 'Music Discoveries',
     'New artists: Khruangbin (psychedelic funk), Phoebe Bridgers (indie), Anderson .Paak. Album on repeat: Swimming by Mac Miller.',
     300000),
    # Work & Projects (6 notes)
    ('demo-4', 'Meeting Notes: Q3 Roadmap',
     'Focus on performance optimization. Reduce bundle size by 20%. Launch dark mode by October. Hire 2 more frontend devs.',
     2000000),
    ('demo-3', 'Project Idea: AI Plant Waterer',
     'Use Raspberry Pi + moisture sensor. If dry -> trigger pump. Add camera to detect leaf health using Gemini Vision API. Send alerts via Telegram bot.',
     8000000),
    ('demo-21', 'Sprint Planning: Dashboard Redesign',
     'User stories: New analytics widgets, export to PDF, mobile responsive layout. Estimate: 3 sprints. Need designer input on color palette.',
     1800000),
    ('demo-22', 'Side Project: Chrome Extension',
     'Build tab manager extension. Features: Group tabs by domain, save sessions, keyboard shortcuts. Use Chrome Storage API. Manifest V3.',
     6500000),
    ('demo-23', 'Freelance Client: Logo Design',
     'Client wants minimalist logo for coffee shop. Mood: earthy, warm, artisanal. Deliverables: SVG, PNG (transparent), 3 color variations. Due: Next Friday.',
     4500000),
    ('demo-24', 'Performance Review Prep',
     'Accomplishments: Shipped payment integration, reduced API latency 40%, mentored 2 junior devs. Goals: Learn system design, lead a feature team.',
     3500000),
    # Health & Fitness (6 notes)
    ('demo-25', 'Workout Routine',
     'Push day: Bench press 4x8, Overhead press 3x10, Tricep dips 3x12. Pull day: Deadlifts 4x6, Pull-ups 3x8, Rows 3x10. Legs: Squats 4x8, Lunges 3x12.',
     5500000),
    ('demo-26', 'Running Progress',
     '5K PR: 24:38. Current weekly mileage: 25 miles. Goal: Sub-23 min 5K by December. Long run Sundays, tempo Wednesdays, easy pace other days.',
     1200000),
    ('demo-27', 'Sleep Optimization',
     'Target: 7.5-8 hours. No screens 1 hour before bed. Room temp 68°F. Magnesium supplement helps. Morning sunlight exposure within 30 min of waking.',
     7500000),
    ('demo-28', 'Meditation Practice',
     'Daily 10-min session using Headspace. Focus on breath. Notice thoughts without judgment. Trying body scan technique. Consistency > duration.',
     600000),
    ('demo-29', 'Supplement Stack',
     'Morning: Vitamin D3 5000 IU, Omega-3 fish oil, Creatine 5g. Evening: Magnesium glycinate 400mg, Zinc 25mg. Post-workout: Whey protein.',
     10500000),
    ('demo-30', 'Injury Prevention Notes',
     'Warm up properly: 5-10 min cardio + dynamic stretching. Foam roll IT band and calves. Strengthen glutes to prevent knee pain. Listen to body - rest when needed.',
     14000000),
]


def demo_notes() -> List[Note]:
    """Fresh demo notes (no embeddings), timestamped relative to now."""
    now = now_millis()
    return [
        Note(id=note_id, title=title, content=content, created_at=now - age)
        for note_id, title, content, age in DEMO_NOTES
    ]
