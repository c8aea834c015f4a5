"""
Example instrument for demos and tests.

A small household survey with:
    - metadata fields (start, end, today, deviceid)
    - an enumerator selector and a consent question
    - a note and a preloaded calculation (both dropped from the model)
    - a household member roster (repeat group "members")
    - a non-repeat group with GPS, a date and a select_one
    - labels containing quotes, line breaks and "$"
    - a legacy choice row with a non-numeric code
"""
from typing import List, Tuple

from hfcgen.model import RawChoiceRow, RawSurveyRow


def build_household_choices() -> List[RawChoiceRow]:
    return [
        RawChoiceRow("enumerators", "101", "Amina"),
        RawChoiceRow("enumerators", "102", "Kofi"),
        RawChoiceRow("yes-no", "1", "Yes"),
        RawChoiceRow("yes-no", "0", "No"),
        RawChoiceRow("yes-no", "dk", "Don't know"),
        RawChoiceRow("sex", "1", "Male"),
        RawChoiceRow("sex", "2", "Female"),
        RawChoiceRow("activities", "1", "Farming"),
        RawChoiceRow("activities", "2", "Trading"),
        RawChoiceRow("activities", "3", 'Attending "school"'),
        RawChoiceRow("old_list", "1", "Retired option"),
    ]


def build_household_survey() -> List[RawSurveyRow]:
    return [
        RawSurveyRow("start", "start", ""),
        RawSurveyRow("end", "end", ""),
        RawSurveyRow("today", "today", ""),
        RawSurveyRow("deviceid", "deviceid", ""),
        RawSurveyRow("select_one enumerators", "enum_id", "Enumerator", "Enumerator ID"),
        RawSurveyRow("select_one yes-no", "consent", "Does the respondent\nconsent?", "Consent given"),
        RawSurveyRow("note", "intro_note", "Thank you for your time."),
        RawSurveyRow("text", "resp_name", "Respondent name"),
        RawSurveyRow("integer", "hh_size", "How many people live in the household?", "Household size"),
        RawSurveyRow("calculate", "prev_size", "", "", "pulldata('hh', 'size', 'id', ${hhid})"),
        RawSurveyRow("begin repeat", "members", "Household members", "Member roster"),
        RawSurveyRow("text", "member_name", "Name of member"),
        RawSurveyRow("integer", "member_age", "Age of ${member_name}", "Member age"),
        RawSurveyRow("select_one sex", "member_sex", "Sex of ${member_name}", "Member sex"),
        RawSurveyRow("select_multiple activities", "member_activities", "Main activities"),
        RawSurveyRow("end repeat", "members_end", ""),
        RawSurveyRow("begin group", "dwelling", "Dwelling"),
        RawSurveyRow("geopoint", "gps", "Household location"),
        RawSurveyRow("select_one yes-no", "has_electricity", "Does the dwelling have electricity?"),
        RawSurveyRow("date", "last_harvest", "Date of last harvest"),
        RawSurveyRow("end group", "dwelling_end", ""),
        RawSurveyRow("decimal", "income", 'Monthly income ("in $")', "Monthly income"),
        RawSurveyRow("image", "house_photo", "Photo of the house"),
        RawSurveyRow("text audit", "audit", ""),
    ]


def build_household_instrument() -> Tuple[List[RawChoiceRow], List[RawSurveyRow]]:
    """Return (choice_rows, survey_rows) for the example household survey."""
    return build_household_choices(), build_household_survey()
