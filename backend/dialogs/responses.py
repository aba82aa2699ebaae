import re
from typing import Optional

from models.immigration import ResponseEntry


# -------------------------------------------------------
# Work Authorization Answers
#
# Keyed on (visa_type, work_type), both normalized.
# Only F1 students are covered today.
# -------------------------------------------------------

ON_CAMPUS_TEXT = (
    "On-campus employment must meet one of the following definitions: \n"
    "The employment takes place on school premises and the employee (student) is paid by the university "
    "for the work. Examples include GSI/GSR positions or jobs at dining halls, campus libraries, etc. "
    "This is the most common type of on-campus employment. \n"
    "The employment takes place at a commercial firm (e.g., bookstore, coffee shop) that is located on "
    "the university floor campus and provides services for students on campus. \n"
    "The employment takes place at an off-campus location that is educationally affiliated with UC Berkeley. "
    "The affiliation must be associated with the school's established curriculum or related to "
    "contractually-funded research projects at the post-graduate level. The employment must be an "
    "integral part of the student's educational program."
)

CPT_TEXT = (
    "Speak to a student advisor at your university to find out more about the CPT programs available at "
    "your institution, the eligibility requirements, and potential employers. If you’re not yet an "
    "international student in the US consider going through a program like HTIR Work-Study.\n"
    "Take any college required CPT courses necessary to become an eligible candidate.\n"
    "Obtain a job offer letter on official letterhead from your employer. Universities typically have a "
    "list of specific information this letter should include, like the address where work will take place.\n"
    "Apply for the college-specific CPT program through your university. Note that authorization can take "
    "a few weeks, so plan ahead. Before beginning the application process make sure you have all requested "
    "documentation such as proof of class registration.\n"
    "You will receive a document (physical or by email) approving your application and outlining your CPT "
    "start and end date. Print, sign and make a copy of this document where required.\n"
    "Talk to your employer and send relevant documentation where required.\n"
    "Start the CPT program with your employer on the outlined start date."
)

OPT_TEXT = (
    "Confirm your 12-month OPT information is correct\n"
    "Complete and submit your STEM OPT Extension I-20 Request to ISS \n"
    "Pick up New I-20 and prepare your application\n"
    "Mail your application to USCIS."
)

F1_VISA = "f1"

# F-1, H-1B, J1 ...
VISA_CODE = re.compile(r"^[a-z]-?\d[a-z]?$")

RESPONSE_TABLE: dict[tuple[str, str], ResponseEntry] = {
    (entry.visa_type, entry.work_type): entry
    for entry in (
        ResponseEntry(visa_type=F1_VISA, work_type="on campus", text=ON_CAMPUS_TEXT),
        ResponseEntry(visa_type=F1_VISA, work_type="cpt", text=CPT_TEXT),
        ResponseEntry(visa_type=F1_VISA, work_type="opt", text=OPT_TEXT),
    )
}

COMING_SOON_TEMPLATE = "More information regarding the {visa_type} work authorization rules coming soon! Thanks!"
NOT_AVAILABLE_TEMPLATE = "I don't have information about {work_type} work authorization for F1 students yet."


def normalize_key(value: Optional[str]) -> str:
    """'F-1' -> 'f1', 'On-Campus' -> 'on campus'."""
    if not value:
        return ""
    text = value.strip().lower().replace("_", " ")
    if VISA_CODE.match(text):
        return text.replace("-", "")
    return " ".join(text.replace("-", " ").split())


def find_response(visa_type: Optional[str], work_type: Optional[str]) -> Optional[ResponseEntry]:
    """Table lookup. None means we have no answer for this combination."""
    return RESPONSE_TABLE.get((normalize_key(visa_type), normalize_key(work_type)))


def select_response(visa_type: Optional[str], work_type: Optional[str]) -> str:
    """
    Pick the answer text for a (visa_type, work_type) pair.

    Always returns text: the table entry, a "not available" message for
    F1 work types we don't cover, or the "coming soon" message for any
    other visa type.
    """
    visa_key = normalize_key(visa_type)
    if visa_key != F1_VISA:
        return COMING_SOON_TEMPLATE.format(visa_type=visa_type or "requested")

    entry = find_response(visa_type, work_type)
    if entry is None:
        return NOT_AVAILABLE_TEMPLATE.format(work_type=work_type or "that kind of")
    return entry.text
