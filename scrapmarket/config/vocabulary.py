# scrapmarket/config/vocabulary.py

"""Keyword vocabularies used by the grouper, scorer and formatter.

Kept as plain data so they can be swapped or extended without touching
the matching code. Effects:

- ``pack_brands``: pack detection and the shared-brand similarity bonus.
- ``stopwords``: keyword tokenisation for similarity.
- ``type_synonyms`` / ``phrase_synonyms``: variant folding for similarity.
- ``irrelevant_keywords``, ``food_query_terms``, ``non_food_keywords``:
  the relevance hard veto.
- ``semantic_clusters``: the relevance category bonus.
"""

from dataclasses import dataclass, field

PACK_BRANDS: frozenset[str] = frozenset({
    "sprite", "coca", "pepsi", "pepitos", "havanna", "fanta", "seven",
})

STOPWORDS: frozenset[str] = frozenset({
    "con", "para", "sin", "del", "las", "los", "una", "uno",
})

# Multi-word variants folded before tokenising
PHRASE_SYNONYMS: dict[str, str] = {
    "sin azucar": "zero",
    "sin azúcar": "zero",
}

TYPE_SYNONYMS: dict[str, str] = {
    "zero": "zero",
    "light": "light",
    "diet": "diet",
    "comun": "original",
    "común": "original",
    "original": "original",
    "clasica": "original",
    "clásica": "original",
}

IRRELEVANT_KEYWORDS: tuple[str, ...] = (
    # pets
    "alimento para perro", "alimento para gato", "comida para perro",
    "comida para gato", "mascota", "pet", "dog", "cat", "perro", "gato",
    "animal", "veterinario",
    # pharmacy
    "medicina", "medicamento", "farmacia", "suplemento", "vitamina",
    # cleaning
    "limpieza", "detergente", "jabón", "shampoo", "pasta dental",
    # clothing
    "ropa", "vestimenta", "calzado", "zapatos", "camisa", "pantalón",
    # appliances
    "electrodoméstico", "electrónico", "cocina", "heladera", "microondas",
    # hardware
    "herramienta", "ferretería", "construcción", "pintura", "bricolaje",
)

FOOD_QUERY_TERMS: tuple[str, ...] = (
    "pollo", "carne", "pescado", "leche", "huevo", "pan", "arroz",
    "papa", "tomate",
)

NON_FOOD_KEYWORDS: tuple[str, ...] = (
    "alimento para", "comida para", "mascota", "pet", "medicina", "ropa",
    "electrodoméstico",
)

SEMANTIC_CLUSTERS: dict[str, tuple[str, ...]] = {
    "carnes": (
        "pollo", "carne", "pescado", "jamón", "salchicha", "chorizo",
        "bife", "lomo",
    ),
    "lacteos": (
        "leche", "yogur", "queso", "manteca", "crema", "mantequilla",
    ),
    "panaderia": (
        "pan", "galleta", "tostada", "factura", "medialuna", "croissant",
    ),
    "bebidas": (
        "agua", "jugo", "gaseosa", "cerveza", "vino", "café", "té",
    ),
    "frutas_verduras": (
        "tomate", "cebolla", "papa", "zanahoria", "lechuga", "banana",
        "manzana", "naranja",
    ),
    "granos": (
        "arroz", "fideos", "avena", "cereales", "quinoa", "lentejas",
        "porotos",
    ),
}


@dataclass(frozen=True)
class Vocabulary:
    """Bundle of keyword tables injected into the matching components."""

    pack_brands: frozenset[str] = PACK_BRANDS
    stopwords: frozenset[str] = STOPWORDS
    phrase_synonyms: dict[str, str] = field(
        default_factory=lambda: dict(PHRASE_SYNONYMS)
    )
    type_synonyms: dict[str, str] = field(
        default_factory=lambda: dict(TYPE_SYNONYMS)
    )
    irrelevant_keywords: tuple[str, ...] = IRRELEVANT_KEYWORDS
    food_query_terms: tuple[str, ...] = FOOD_QUERY_TERMS
    non_food_keywords: tuple[str, ...] = NON_FOOD_KEYWORDS
    semantic_clusters: dict[str, tuple[str, ...]] = field(
        default_factory=lambda: dict(SEMANTIC_CLUSTERS)
    )


DEFAULT_VOCABULARY = Vocabulary()


# ── Display vocabularies (structured name cleaning) ─────

DISPLAY_BRANDS: tuple[str, ...] = (
    "sprite", "coca cola", "coca-cola", "coca", "pepsi", "fanta",
    "seven up", "schweppes", "powerade", "gatorade", "aquarius",
    "nestle", "nesquik", "nescafe", "maggi", "kit kat", "ferrero",
    "nutella", "kinder", "mars", "snickers", "twix", "oreo", "toblerone",
    "cadbury", "lipton", "knorr", "hellmann", "danone", "activia",
    "danonino", "lays", "doritos", "cheetos", "ruffles", "pepitos",
    "terrabusi", "bagley", "arcor", "havanna", "cachafaz", "jorgito",
)

DISPLAY_TYPES: tuple[str, ...] = (
    "zero", "light", "diet", "sin azucar", "sin azúcar", "comun",
    "original", "clasica", "clásica", "x2", "x3", "x4", "x5", "x6",
)

DISPLAY_FLAVORS: tuple[str, ...] = (
    "lima limon", "lima limón", "limon", "limón", "naranja", "uva",
    "manzana", "frutilla", "cereza", "durazno", "mango", "ananá", "coco",
    "menta", "chocolate", "vainilla", "dulce de leche", "banana",
    "almendras", "avellanas",
)

# (keywords, category label), first hit wins
DISPLAY_CATEGORIES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("gaseosa", "soda", "refresco"), "Gaseosa"),
    (("agua", "mineral"), "Agua"),
    (("jugo", "néctar"), "Jugo"),
    (("cerveza", "birra"), "Cerveza"),
    (("alfajor",), "Alfajor"),
    (("galletita", "galletas", "cookies"), "Galletitas"),
    (("chocolate",), "Chocolate"),
    (("papas", "chips", "snack"), "Snack"),
    (("yogur",), "Yogur"),
    (("leche",), "Leche"),
    (("queso", "crema"), "Lácteo"),
    (("aceite", "vinagre"), "Condimento"),
    (("mayonesa", "ketchup", "mostaza"), "Aderezo"),
    (("helado", "postre"), "Helado"),
)
