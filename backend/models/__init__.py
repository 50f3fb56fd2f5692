from models.base import Base
from models.class_section import ClassSection
from models.preference import Preference
from models.student import Student
from models.subject import Subject
from models.teacher import Teacher
from models.timetable_entry import TimetableEntry

__all__ = [
	"Base",
	"ClassSection",
	"Preference",
	"Student",
	"Subject",
	"Teacher",
	"TimetableEntry",
]
