from enum import Enum


class Category(str, Enum):
    sports = "sports"
    travel = "travel"
    leisure = "leisure"
    studies = "studies"


CATEGORY_LABELS = {
    Category.sports: "Deportes",
    Category.travel: "Viajes",
    Category.leisure: "Ocio",
    Category.studies: "Estudios",
}

SUBCATEGORIES = {
    Category.sports: [
        "Tenis", "Pádel", "Fútbol", "Squash", "Running", "Bicicleta",
        "Skate", "Roller", "Natación", "Voley", "Otros",
    ],
    Category.travel: ["Compañero de viaje", "Compartir ruta", "Escapadas", "Mochileros", "Road trips", "Camping"],
    Category.leisure: ["Cine", "Teatro", "Conciertos", "Museos", "Caminar", "Plaza", "Charlas", "Juegos de mesa"],
    Category.studies: ["Debates", "Grupos de lectura", "Intercambio de ideas", "Idiomas", "Tutorías", "Coworking"],
}

SKILL_LEVELS = {
    1: "Principiante",
    2: "Básico",
    3: "Intermedio",
    4: "Avanzado",
    5: "Experto",
}

AGE_MIN = 18
AGE_MAX = 99


def is_valid_subcategory(category: Category, subcategory: str) -> bool:
    return subcategory in SUBCATEGORIES.get(Category(category), [])
