from enum import Enum


class Interest(str, Enum):
    tennis = "Tenis"
    padel = "Pádel"
    football = "Fútbol"
    running = "Running"
    swimming = "Natación"
    cycling = "Ciclismo"
    travel = "Viajes"
    cinema = "Cine"
    reading = "Lectura"
    photography = "Fotografía"
    music = "Música"
    cooking = "Cocina"
    yoga = "Yoga"
    gym = "Gimnasio"
    climbing = "Escalada"
    hiking = "Senderismo"
