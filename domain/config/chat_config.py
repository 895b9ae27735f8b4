from pydantic import BaseModel, Field
from typing import List


class ChatConfig(BaseModel):
    """Textos e opções usados pelo fluxo de feedback."""

    club_name: str = "Benares Club"
    categories: List[str] = Field(default_factory=lambda: ["Upkeep & Maintenance", "Others"])

    # Templates aprovados na Meta
    optin_template: str = "optin"
    select_template: str = "select"
    image_upload_template: str = "image_upload"

    yes_payload: str = "Yes"
    no_payload: str = "No"
    stop_keyword: str = "stop"

    # Message templates
    greeting_message: str = "Greetings from *{club_name}*!"
    name_prompt: str = "Please enter your *name*."
    membership_prompt: str = "Please enter your *membership number*."
    describe_issue_prompt: str = "Please describe the issue related to {category}."
    upload_image_prompt: str = "Please upload the image now."
    upload_image_reminder: str = "Please upload the image."
    image_received_message: str = "Got your image. Please type a short description of the issue."
    image_failed_message: str = "Could not process your image."
    thank_you_message: str = "Thank you, your feedback has been recorded successfully."
    restart_message: str = "Missing some info. Let's restart."
    unsupported_message: str = "I can only process text, images, or buttons."
    optout_message: str = "You have opted out and will no longer receive messages from us. Send any message to opt in again."
    stop_message: str = "You have been unsubscribed. Send any message if you want to share feedback again."

    @property
    def greeting(self) -> str:
        return self.greeting_message.format(club_name=self.club_name)
