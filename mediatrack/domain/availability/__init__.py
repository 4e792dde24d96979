"""Property availability: iCal parsing, interval algebra, day views and gap search"""
