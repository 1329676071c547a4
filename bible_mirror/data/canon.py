"""Bible canon metadata - book ids, names, chapters."""

from typing import Dict, List, Optional, Sequence

from bible_mirror.data.types import BibleBook


# Canonical order; ids follow the USFM-style codes the scripture APIs use
_CANON_TABLE: Sequence[BibleBook] = (
    # Old Testament
    BibleBook("GEN", "Gen", "Genesis", "Genesis", 50, "创世记", "chuangshiji", "csj"),
    BibleBook("EXO", "Exo", "Exodus", "Exodus", 40, "出埃及记", "chuaijiji", "caijj"),
    BibleBook("LEV", "Lev", "Leviticus", "Leviticus", 27, "利未记", "liweiji", "lwj"),
    BibleBook("NUM", "Num", "Numbers", "Numbers", 36, "民数记", "minshuji", "msj"),
    BibleBook("DEU", "Deu", "Deuteronomy", "Deuteronomy", 34, "申命记", "shenmingji", "smj"),
    BibleBook("JOS", "Jos", "Joshua", "Joshua", 24, "约书亚记", "yueshuyaji", "jsyj"),
    BibleBook("JDG", "Jdg", "Judges", "Judges", 21, "士师记", "shishiji", "ssj"),
    BibleBook("RUT", "Rut", "Ruth", "Ruth", 4, "路得记", "ludeji", "ldj"),
    BibleBook("1SA", "1Sa", "1 Samuel", "1 Samuel", 31, "撒母耳记上", "samuerjishang", "smejs"),
    BibleBook("2SA", "2Sa", "2 Samuel", "2 Samuel", 24, "撒母耳记下", "samuerjixia", "smejx"),
    BibleBook("1KI", "1Ki", "1 Kings", "1 Kings", 22, "列王纪上", "liewangjishang", "lwjs"),
    BibleBook("2KI", "2Ki", "2 Kings", "2 Kings", 25, "列王纪下", "liewangjixia", "lwjx"),
    BibleBook("1CH", "1Ch", "1 Chronicles", "1 Chronicles", 29, "历代志上", "lidaizhishang", "ldzs"),
    BibleBook("2CH", "2Ch", "2 Chronicles", "2 Chronicles", 36, "历代志下", "lidaizhixia", "ldzx"),
    BibleBook("EZR", "Ezr", "Ezra", "Ezra", 10, "以斯拉记", "yisilaji", "yslj"),
    BibleBook("NEH", "Neh", "Nehemiah", "Nehemiah", 13, "尼希米记", "niximiji", "nxmj"),
    BibleBook("EST", "Est", "Esther", "Esther", 10, "以斯帖记", "yisitieji", "ystj"),
    BibleBook("JOB", "Job", "Job", "Job", 42, "约伯记", "yueboji", "ybj"),
    BibleBook("PSA", "Psa", "Psalms", "Psalms", 150, "诗篇", "shipian", "sp"),
    BibleBook("PRO", "Pro", "Proverbs", "Proverbs", 31, "箴言", "zhenyan", "zy"),
    BibleBook("ECC", "Ecc", "Ecclesiastes", "Ecclesiastes", 12, "传道书", "chuandaoshu", "cds"),
    BibleBook("SOS", "Sos", "Song of Solomon", "Song of Solomon", 8, "雅歌", "yage", "yg"),
    BibleBook("ISA", "Isa", "Isaiah", "Isaiah", 66, "以赛亚书", "yisaiyashu", "ysys"),
    BibleBook("JER", "Jer", "Jeremiah", "Jeremiah", 52, "耶利米书", "yelimishu", "ylms"),
    BibleBook("LAM", "Lam", "Lamentations", "Lamentations", 5, "耶利米哀歌", "yelimiaige", "ylmag"),
    BibleBook("EZK", "Ezk", "Ezekiel", "Ezekiel", 48, "以西结书", "yixijieshu", "yxjs"),
    BibleBook("DAN", "Dan", "Daniel", "Daniel", 12, "但以理书", "danyilishu", "dyls"),
    BibleBook("HOS", "Hos", "Hosea", "Hosea", 14, "何西阿书", "hexiashu", "hxas"),
    BibleBook("JOL", "Jol", "Joel", "Joel", 3, "约珥书", "yueershu", "yes"),
    BibleBook("AMO", "Amo", "Amos", "Amos", 9, "阿摩司书", "amosishu", "amss"),
    BibleBook("OBA", "Oba", "Obadiah", "Obadiah", 1, "俄巴底亚书", "ebadiyashu", "ebdys"),
    BibleBook("JON", "Jon", "Jonah", "Jonah", 4, "约拿书", "yuenashu", "yns"),
    BibleBook("MIC", "Mic", "Micah", "Micah", 7, "弥迦书", "mijiashu", "mjs"),
    BibleBook("NAH", "Nah", "Nahum", "Nahum", 3, "那鸿书", "nahongshu", "nhs"),
    BibleBook("HAB", "Hab", "Habakkuk", "Habakkuk", 3, "哈巴谷书", "habagushu", "hbgs"),
    BibleBook("ZEP", "Zep", "Zephaniah", "Zephaniah", 3, "西番雅书", "xifanyashu", "xfys"),
    BibleBook("HAG", "Hag", "Haggai", "Haggai", 2, "哈该书", "hagaishu", "hgs"),
    BibleBook("ZEC", "Zec", "Zechariah", "Zechariah", 14, "撒迦利亚书", "sajialiyashu", "sjlys"),
    BibleBook("MAL", "Mal", "Malachi", "Malachi", 4, "玛拉基书", "malajishu", "mljs"),
    # New Testament
    BibleBook("MAT", "Mat", "Matthew", "Matthew", 28, "马太福音", "mataifoyin", "mtfy"),
    BibleBook("MRK", "Mrk", "Mark", "Mark", 16, "马可福音", "makefoyin", "mkfy"),
    BibleBook("LUK", "Luk", "Luke", "Luke", 24, "路加福音", "lujiafoyin", "ljfy"),
    BibleBook("JHN", "Jhn", "John", "John", 21, "约翰福音", "yuehanfoyin", "yhfy"),
    BibleBook("ACT", "Act", "Acts", "Acts", 28, "使徒行传", "shituxingzhuan", "stxz"),
    BibleBook("ROM", "Rom", "Romans", "Romans", 16, "罗马书", "luomashu", "lms"),
    BibleBook("1CO", "1Co", "1 Corinthians", "1 Corinthians", 16, "哥林多前书", "gelinduoqianshu", "gldqs"),
    BibleBook("2CO", "2Co", "2 Corinthians", "2 Corinthians", 13, "哥林多后书", "gelinduohoushu", "gldhs"),
    BibleBook("GAL", "Gal", "Galatians", "Galatians", 6, "加拉太书", "jialatashu", "jlts"),
    BibleBook("EPH", "Eph", "Ephesians", "Ephesians", 6, "以弗所书", "yifusuoshu", "yfss"),
    BibleBook("PHP", "Php", "Philippians", "Philippians", 4, "腓立比书", "feilibishu", "flbs"),
    BibleBook("COL", "Col", "Colossians", "Colossians", 4, "歌罗西书", "geluoxishu", "glxs"),
    BibleBook("1TH", "1Th", "1 Thessalonians", "1 Thessalonians", 5, "帖撒罗尼迦前书", "tiesaluonijiaqianshu", "tslnjqs"),
    BibleBook("2TH", "2Th", "2 Thessalonians", "2 Thessalonians", 3, "帖撒罗尼迦后书", "tiesaluonijiahoushu", "tslnjhs"),
    BibleBook("1TI", "1Ti", "1 Timothy", "1 Timothy", 6, "提摩太前书", "timotaiqianshu", "tmtqs"),
    BibleBook("2TI", "2Ti", "2 Timothy", "2 Timothy", 4, "提摩太后书", "timotaihoushu", "tmths"),
    BibleBook("TIT", "Tit", "Titus", "Titus", 3, "提多书", "tiduoshu", "tds"),
    BibleBook("PHM", "Phm", "Philemon", "Philemon", 1, "腓利门书", "feilimenshu", "flms"),
    BibleBook("HEB", "Heb", "Hebrews", "Hebrews", 13, "希伯来书", "xibolaishu", "xbls"),
    BibleBook("JAS", "Jas", "James", "James", 5, "雅各书", "yageshu", "ygs"),
    BibleBook("1PE", "1Pe", "1 Peter", "1 Peter", 5, "彼得前书", "bideqianshu", "bdqs"),
    BibleBook("2PE", "2Pe", "2 Peter", "2 Peter", 3, "彼得后书", "bidehoushu", "bdhs"),
    BibleBook("1JN", "1Jn", "1 John", "1 John", 5, "约翰一书", "yuehanyishu", "yhys"),
    BibleBook("2JN", "2Jn", "2 John", "2 John", 1, "约翰二书", "yuehanershu", "yhes"),
    BibleBook("3JN", "3Jn", "3 John", "3 John", 1, "约翰三书", "yuehansanshu", "yhss"),
    BibleBook("JUD", "Jud", "Jude", "Jude", 1, "犹大书", "youdashu", "yds"),
    BibleBook("REV", "Rev", "Revelation", "Revelation", 22, "启示录", "qishilu", "qsl"),
)

# Book order list
BOOK_ORDER: List[str] = [book.id for book in _CANON_TABLE]

# Lookup tables
_BOOK_BY_ID: Dict[str, BibleBook] = {book.id: book for book in _CANON_TABLE}

# API.Bible spells a few ids differently
API_BIBLE_BOOK_IDS: Dict[str, str] = {"SOS": "SNG"}


def all_books() -> List[BibleBook]:
    """Return the bundled book list in canonical order."""
    return list(_CANON_TABLE)


def get_book(book_id: str) -> Optional[BibleBook]:
    """Get a BibleBook by its id (case-insensitive)."""
    return _BOOK_BY_ID.get(book_id.upper())


def book_chapters(book_id: str) -> int:
    """Return the number of chapters in a book."""
    book = get_book(book_id)
    return book.chapters if book else 0


def book_index(book_id: str) -> int:
    """Return the index of a book in the canon (0-based)."""
    try:
        return BOOK_ORDER.index(book_id.upper())
    except ValueError:
        return -1


def book_number(book_id: str) -> int:
    """Return the 1-based book number used by GetBible (Genesis if unknown)."""
    idx = book_index(book_id)
    return idx + 1 if idx >= 0 else 1


def api_bible_book_id(book_id: str) -> str:
    """Return the book id API.Bible expects."""
    return API_BIBLE_BOOK_IDS.get(book_id, book_id)


def filter_books(books: Sequence[BibleBook], query: str) -> List[BibleBook]:
    """Filter books by substring over names, abbreviation, id and Chinese name."""
    needle = query.strip()
    if not needle:
        return list(books)

    lowered = needle.lower()
    return [
        book
        for book in books
        if lowered in book.name.lower()
        or lowered in book.name_long.lower()
        or lowered in book.abbreviation.lower()
        or lowered in book.id.lower()
        or (book.name_chinese and needle in book.name_chinese)
    ]


def next_book(book_id: str) -> Optional[str]:
    """Return the next book in the canon."""
    idx = book_index(book_id)
    if 0 <= idx < len(BOOK_ORDER) - 1:
        return BOOK_ORDER[idx + 1]
    return None


def prev_book(book_id: str) -> Optional[str]:
    """Return the previous book in the canon."""
    idx = book_index(book_id)
    if idx > 0:
        return BOOK_ORDER[idx - 1]
    return None
