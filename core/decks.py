"""Static scripture decks (KJV text)."""

from .models import Deck, ScriptureCard

# Deck id -> deck definition. Declaration order is the unlock order used by
# the progress engine, so keep it stable.
DECK_DEFINITIONS = [
    {
        'id': 'foundation',
        'name': 'Foundation',
        'description': 'Core verses every believer should know',
        'icon': '🏛️',
        'color': '#4F46E5',
        'unlock_level': 1,
        'cards': [
            ('John 3:16', 'God so loved...',
             'For God so loved the world, that he gave his only begotten Son, that whosoever '
             'believeth in him should not perish, but have everlasting life.'),
            ('Genesis 1:1', 'In the beginning...',
             'In the beginning God created the heaven and the earth.'),
            ('Psalm 119:105', 'A lamp unto my feet...',
             'Thy word is a lamp unto my feet, and a light unto my path.'),
            ('2 Timothy 3:16', 'All scripture...',
             'All scripture is given by inspiration of God, and is profitable for doctrine, '
             'for reproof, for correction, for instruction in righteousness.'),
            ('Proverbs 3:5', 'Trust in the LORD...',
             'Trust in the LORD with all thine heart; and lean not unto thine own understanding.'),
        ],
    },
    {
        'id': 'salvation',
        'name': 'Salvation',
        'description': 'The gospel message of grace',
        'icon': '✝️',
        'color': '#DC2626',
        'unlock_level': 1,
        'cards': [
            ('Romans 3:23', 'All have sinned...',
             'For all have sinned, and come short of the glory of God;'),
            ('Romans 6:23', 'The wages of sin...',
             'For the wages of sin is death; but the gift of God is eternal life through '
             'Jesus Christ our Lord.'),
            ('Ephesians 2:8', 'By grace are ye saved...',
             'For by grace are ye saved through faith; and that not of yourselves: it is the '
             'gift of God:'),
            ('Romans 10:9', 'Confess with thy mouth...',
             'That if thou shalt confess with thy mouth the Lord Jesus, and shalt believe in '
             'thine heart that God hath raised him from the dead, thou shalt be saved.'),
        ],
    },
    {
        'id': 'faith',
        'name': 'Faith',
        'description': 'Verses on believing and trusting God',
        'icon': '🛡️',
        'color': '#0EA5E9',
        'unlock_level': 2,
        'cards': [
            ('Hebrews 11:1', 'Faith is the substance...',
             'Now faith is the substance of things hoped for, the evidence of things not seen.'),
            ('Hebrews 11:6', 'Without faith...',
             'But without faith it is impossible to please him: for he that cometh to God must '
             'believe that he is, and that he is a rewarder of them that diligently seek him.'),
            ('Romans 10:17', 'Faith cometh by hearing...',
             'So then faith cometh by hearing, and hearing by the word of God.'),
            ('2 Corinthians 5:7', 'We walk by faith...',
             'For we walk by faith, not by sight:'),
        ],
    },
    {
        'id': 'prayer',
        'name': 'Prayer',
        'description': 'Learning to talk with God',
        'icon': '🙏',
        'color': '#8B5CF6',
        'unlock_level': 3,
        'cards': [
            ('Philippians 4:6', 'Be careful for nothing...',
             'Be careful for nothing; but in every thing by prayer and supplication with '
             'thanksgiving let your requests be made known unto God.'),
            ('1 Thessalonians 5:17', 'Pray without...',
             'Pray without ceasing.'),
            ('Matthew 7:7', 'Ask, and it shall be given...',
             'Ask, and it shall be given you; seek, and ye shall find; knock, and it shall be '
             'opened unto you:'),
            ('James 5:16', 'The effectual fervent prayer...',
             'Confess your faults one to another, and pray one for another, that ye may be '
             'healed. The effectual fervent prayer of a righteous man availeth much.'),
        ],
    },
    {
        'id': 'love',
        'name': 'Love',
        'description': 'The greatest of these is love',
        'icon': '❤️',
        'color': '#EC4899',
        'unlock_level': 4,
        'cards': [
            ('1 Corinthians 13:4', 'Charity suffereth long...',
             'Charity suffereth long, and is kind; charity envieth not; charity vaunteth not '
             'itself, is not puffed up,'),
            ('1 John 4:8', 'God is love...',
             'He that loveth not knoweth not God; for God is love.'),
            ('John 13:34', 'A new commandment...',
             'A new commandment I give unto you, That ye love one another; as I have loved you, '
             'that ye also love one another.'),
            ('Romans 5:8', 'God commendeth his love...',
             'But God commendeth his love toward us, in that, while we were yet sinners, '
             'Christ died for us.'),
        ],
    },
    {
        'id': 'wisdom',
        'name': 'Wisdom',
        'description': 'Proverbs and sayings of the wise',
        'icon': '🦉',
        'color': '#F59E0B',
        'unlock_level': 5,
        'cards': [
            ('Proverbs 1:7', 'The fear of the LORD...',
             'The fear of the LORD is the beginning of knowledge: but fools despise wisdom and '
             'instruction.'),
            ('James 1:5', 'If any of you lack wisdom...',
             'If any of you lack wisdom, let him ask of God, that giveth to all men liberally, '
             'and upbraideth not; and it shall be given him.'),
            ('Proverbs 16:3', 'Commit thy works...',
             'Commit thy works unto the LORD, and thy thoughts shall be established.'),
            ('Proverbs 27:17', 'Iron sharpeneth iron...',
             'Iron sharpeneth iron; so a man sharpeneth the countenance of his friend.'),
        ],
    },
    {
        'id': 'peace',
        'name': 'Peace',
        'description': 'Rest and comfort in troubled times',
        'icon': '🕊️',
        'color': '#10B981',
        'unlock_level': 6,
        'cards': [
            ('John 14:27', 'Peace I leave with you...',
             'Peace I leave with you, my peace I give unto you: not as the world giveth, give I '
             'unto you. Let not your heart be troubled, neither let it be afraid.'),
            ('Philippians 4:7', 'The peace of God...',
             'And the peace of God, which passeth all understanding, shall keep your hearts '
             'and minds through Christ Jesus.'),
            ('Isaiah 26:3', 'Perfect peace...',
             'Thou wilt keep him in perfect peace, whose mind is stayed on thee: because he '
             'trusteth in thee.'),
            ('Matthew 11:28', 'Come unto me...',
             'Come unto me, all ye that labour and are heavy laden, and I will give you rest.'),
        ],
    },
    {
        'id': 'strength',
        'name': 'Strength',
        'description': 'Courage for every battle',
        'icon': '💪',
        'color': '#EF4444',
        'unlock_level': 7,
        'cards': [
            ('Philippians 4:13', 'I can do all things...',
             'I can do all things through Christ which strengtheneth me.'),
            ('Isaiah 40:31', 'They that wait upon the LORD...',
             'But they that wait upon the LORD shall renew their strength; they shall mount up '
             'with wings as eagles; they shall run, and not be weary; and they shall walk, and '
             'not faint.'),
            ('Joshua 1:9', 'Be strong and of a good courage...',
             'Have not I commanded thee? Be strong and of a good courage; be not afraid, '
             'neither be thou dismayed: for the LORD thy God is with thee whithersoever thou '
             'goest.'),
            ('Psalm 46:1', 'God is our refuge...',
             'God is our refuge and strength, a very present help in trouble.'),
        ],
    },
    {
        'id': 'hope',
        'name': 'Hope',
        'description': 'An anchor for the soul',
        'icon': '⚓',
        'color': '#06B6D4',
        'unlock_level': 8,
        'cards': [
            ('Jeremiah 29:11', 'I know the thoughts...',
             'For I know the thoughts that I think toward you, saith the LORD, thoughts of '
             'peace, and not of evil, to give you an expected end.'),
            ('Romans 15:13', 'The God of hope...',
             'Now the God of hope fill you with all joy and peace in believing, that ye may '
             'abound in hope, through the power of the Holy Ghost.'),
            ('Romans 8:28', 'All things work together...',
             'And we know that all things work together for good to them that love God, to '
             'them who are the called according to his purpose.'),
            ('Lamentations 3:22', 'His compassions fail not...',
             'It is of the LORD\'s mercies that we are not consumed, because his compassions '
             'fail not.'),
        ],
    },
    {
        'id': 'promises',
        'name': 'Promises',
        'description': 'What God has pledged to his people',
        'icon': '🌈',
        'color': '#84CC16',
        'unlock_level': 9,
        'cards': [
            ('Hebrews 13:5', 'I will never leave thee...',
             'Let your conversation be without covetousness; and be content with such things '
             'as ye have: for he hath said, I will never leave thee, nor forsake thee.'),
            ('1 John 1:9', 'If we confess our sins...',
             'If we confess our sins, he is faithful and just to forgive us our sins, and to '
             'cleanse us from all unrighteousness.'),
            ('Matthew 6:33', 'Seek ye first...',
             'But seek ye first the kingdom of God, and his righteousness; and all these things '
             'shall be added unto you.'),
            ('Isaiah 41:10', 'Fear thou not...',
             'Fear thou not; for I am with thee: be not dismayed; for I am thy God: I will '
             'strengthen thee; yea, I will help thee; yea, I will uphold thee with the right '
             'hand of my righteousness.'),
        ],
    },
    {
        'id': 'psalms',
        'name': 'Psalms',
        'description': 'Songs of praise and lament',
        'icon': '🎵',
        'color': '#A855F7',
        'unlock_level': 10,
        'cards': [
            ('Psalm 23:1', 'The LORD is my shepherd...',
             'The LORD is my shepherd; I shall not want.'),
            ('Psalm 119:11', 'Thy word have I hid...',
             'Thy word have I hid in mine heart, that I might not sin against thee.'),
            ('Psalm 46:10', 'Be still...',
             'Be still, and know that I am God: I will be exalted among the heathen, I will be '
             'exalted in the earth.'),
            ('Psalm 118:24', 'This is the day...',
             'This is the day which the LORD hath made; we will rejoice and be glad in it.'),
        ],
    },
    {
        'id': 'gospels',
        'name': 'Gospels',
        'description': 'Words of Jesus from the four gospels',
        'icon': '📖',
        'color': '#F97316',
        'unlock_level': 12,
        'cards': [
            ('John 14:6', 'I am the way...',
             'Jesus saith unto him, I am the way, the truth, and the life: no man cometh unto '
             'the Father, but by me.'),
            ('Matthew 5:16', 'Let your light so shine...',
             'Let your light so shine before men, that they may see your good works, and '
             'glorify your Father which is in heaven.'),
            ('Matthew 28:19', 'Go ye therefore...',
             'Go ye therefore, and teach all nations, baptizing them in the name of the Father, '
             'and of the Son, and of the Holy Ghost:'),
            ('John 8:32', 'The truth shall make you free...',
             'And ye shall know the truth, and the truth shall make you free.'),
            ('Mark 12:30', 'Love the Lord thy God...',
             'And thou shalt love the Lord thy God with all thy heart, and with all thy soul, '
             'and with all thy mind, and with all thy strength: this is the first commandment.'),
        ],
    },
]


def _build_decks() -> list[Deck]:
    decks = []
    for data in DECK_DEFINITIONS:
        cards = [
            ScriptureCard(
                id=f"{data['id']}-{i + 1}",
                deck_id=data['id'],
                reference=reference,
                text=text,
                hint=hint
            )
            for i, (reference, hint, text) in enumerate(data['cards'])
        ]
        decks.append(Deck(
            id=data['id'],
            name=data['name'],
            description=data['description'],
            icon=data['icon'],
            color=data['color'],
            unlock_level=data['unlock_level'],
            cards=cards
        ))
    return decks


DECKS = _build_decks()
_DECKS_BY_ID = {deck.id: deck for deck in DECKS}
_CARDS_BY_ID = {card.id: card for deck in DECKS for card in deck.cards}


def get_deck(deck_id: str) -> Deck | None:
    """Look up a deck by id."""
    return _DECKS_BY_ID.get(deck_id)


def get_card(card_id: str) -> ScriptureCard | None:
    """Look up a card by id."""
    return _CARDS_BY_ID.get(card_id)


def get_all_cards() -> list[ScriptureCard]:
    return list(_CARDS_BY_ID.values())
