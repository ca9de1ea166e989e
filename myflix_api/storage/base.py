from abc import ABC, abstractmethod


class DocumentStore(ABC):
    """
    Capability set the repositories need from a document database.

    Queries are plain equality filters whose keys may be dotted paths
    (``{"Genre.Name": "Drama"}``). Updates use the operators ``$set``,
    ``$addToSet`` and ``$pull`` with a single value per field. Every method
    is one storage operation; implementations must apply each update
    atomically against the matched document.
    """

    @abstractmethod
    def ensure_unique(self, collection: str, field: str):
        """
        Make the store reject a second document with the same ``field`` value.

        Inserts and updates that would break the rule raise ``Conflict``.

        Args:
            collection (str): Collection name.
            field (str): Top-level field that must be unique.
        """

    @abstractmethod
    def find_one(self, collection: str, query: dict):
        """
        Return the first document matching ``query`` or None.

        Args:
            collection (str): Collection name.
            query (dict): Equality filter.

        Returns:
            dict | None: Matching document.
        """

    @abstractmethod
    def find(self, collection: str, query: dict | None = None):
        """
        Return every document matching ``query`` (all documents when empty).

        Args:
            collection (str): Collection name.
            query (dict | None): Equality filter.

        Returns:
            list[dict]: Matching documents in storage order.
        """

    @abstractmethod
    def group_first(self, collection: str, key: str, value, fields: dict[str, str], push_as: str):
        """
        Fold every document where ``key == value`` into one summary record.

        Scalar summary fields are taken from the first matching document;
        the matching documents themselves are collected under ``push_as``.

        Args:
            collection (str): Collection name.
            key (str): Dotted path used for matching and grouping.
            value: Group key to look for.
            fields (dict[str, str]): Summary field name mapped to the dotted
                path read from the first match.
            push_as (str): Summary field holding the matching documents.

        Returns:
            dict | None: Summary record, or None when nothing matches.
        """

    @abstractmethod
    def insert_one(self, collection: str, document: dict):
        """
        Persist a new document, assigning ``_id`` when missing.

        Returns:
            dict: The stored document.
        """

    @abstractmethod
    def find_one_and_update(self, collection: str, query: dict, update: dict):
        """
        Apply ``update`` to the first document matching ``query``.

        Returns:
            dict | None: The document after the update, or None when nothing matched.
        """

    @abstractmethod
    def find_one_and_delete(self, collection: str, query: dict):
        """
        Remove the first document matching ``query``.

        Returns:
            dict | None: The removed document, or None when nothing matched.
        """
