class RecommenderError(Exception):
    """Base class for every error raised by movie_recs."""


class InvalidRangeError(RecommenderError, ValueError):
    """A vectorizer setting is out of range or inconsistent."""


class EmptyVocabularyError(RecommenderError, ValueError):
    """No term survived stopword and document-frequency filtering."""


class UnknownTitleError(RecommenderError, KeyError):
    def __init__(self, title):
        super().__init__(title)
        self.title = title

    def __str__(self):
        return f"Title '{self.title}' not found in corpus"


class UnknownItemError(RecommenderError, KeyError):
    def __init__(self, item_id):
        super().__init__(item_id)
        self.item_id = item_id

    def __str__(self):
        return f"Item id {self.item_id} not found in corpus"


class CorpusFormatError(RecommenderError, ValueError):
    """The metadata table is missing a required column."""
